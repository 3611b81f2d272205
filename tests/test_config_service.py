"""
Unit tests for ConfigService and Config models.
"""
import unittest
import tempfile
import os
import shutil

from certpin.models.config import Config, ConfigValidationError, ConfigValidationResult
from certpin.services.config_service import ConfigService


class TestConfig(unittest.TestCase):
    """Test cases for Config data model."""

    def test_config_default_values(self):
        """Test that Config has appropriate default values."""
        config = Config()

        self.assertEqual(config.pem_path, "certs/pinned_chain.pem")
        self.assertFalse(config.ignore_expired_pinned_cert)
        self.assertEqual(config.host, "")
        self.assertEqual(config.port, 443)
        self.assertEqual(config.timeout_seconds, 10)
        self.assertEqual(config.log_level, "INFO")
        self.assertEqual(config.log_file_path, "logs/certpin.log")

    def test_config_type_validation(self):
        """Test that Config validates types correctly."""
        with self.assertRaises(ValueError) as cm:
            Config(port=0)
        self.assertIn("port must be an integer between 1 and 65535", str(cm.exception))

        with self.assertRaises(ValueError):
            Config(port=70000)

        with self.assertRaises(ValueError):
            Config(timeout_seconds=0)

        with self.assertRaises(ValueError):
            Config(log_level="VERBOSE")

        with self.assertRaises(ValueError):
            Config(ignore_expired_pinned_cert="yes")


class TestConfigValidationResult(unittest.TestCase):
    """Test cases for ConfigValidationResult."""

    def test_errors_and_warnings_summary(self):
        result = ConfigValidationResult(
            is_valid=False,
            errors=[ConfigValidationError("pem_path", "missing")],
            warnings=[ConfigValidationError("host", "empty", "warning")]
        )

        self.assertTrue(result.has_errors())
        self.assertTrue(result.has_warnings())
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(len(result.warnings), 1)
        self.assertIn("ERROR: pem_path - missing", result.get_error_summary())
        self.assertIn("WARNING: host - empty", result.get_error_summary())

    def test_empty_result_is_valid(self):
        result = ConfigValidationResult(is_valid=True, errors=[], warnings=[])
        self.assertEqual(result.get_error_summary(), "Configuration is valid")


class TestConfigService(unittest.TestCase):
    """Test cases for ConfigService."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.pem_path = os.path.join(self.temp_dir, "chain.pem")
        with open(self.pem_path, 'w') as f:
            f.write("placeholder")
        self.config_path = os.path.join(self.temp_dir, "certpin.properties")
        self.service = ConfigService()

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write_config(self, content):
        with open(self.config_path, 'w') as f:
            f.write(content)

    def test_load_config_sections(self):
        self.write_config(f"""
[pin]
pem_path = {self.pem_path}
ignore_expired_pinned_cert = true

[connection]
host = example.com
port = 8443
timeout_seconds = 5

[app]
log_level = DEBUG
log_file_path = {self.temp_dir}/certpin.log
""")

        config = self.service.load_config(self.config_path)

        self.assertEqual(config.pem_path, self.pem_path)
        self.assertTrue(config.ignore_expired_pinned_cert)
        self.assertEqual(config.host, "example.com")
        self.assertEqual(config.port, 8443)
        self.assertEqual(config.timeout_seconds, 5)
        self.assertEqual(config.log_level, "DEBUG")

    def test_overrides_take_precedence(self):
        self.write_config(f"""
[pin]
pem_path = {self.pem_path}

[connection]
host = example.com
port = 8443
""")

        config = self.service.load_config(self.config_path, {'host': 'other.example.com', 'port': 443})

        self.assertEqual(config.host, "other.example.com")
        self.assertEqual(config.port, 443)

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            self.service.load_config(os.path.join(self.temp_dir, "missing.properties"))

    def test_missing_pem_is_an_error(self):
        self.write_config("""
[pin]
pem_path = /nonexistent/chain.pem
""")

        with self.assertRaises(ValueError) as cm:
            self.service.load_config(self.config_path)
        self.assertIn("Certificate file not found", str(cm.exception))

    def test_invalid_integer(self):
        self.write_config(f"""
[pin]
pem_path = {self.pem_path}

[connection]
port = https
""")

        with self.assertRaises(ValueError) as cm:
            self.service.load_config(self.config_path)
        self.assertIn("Invalid value for connection.port", str(cm.exception))

    def test_load_from_values(self):
        config = self.service.load_from_values({
            'pem_path': self.pem_path,
            'ignore_expired_pinned_cert': True,
        })

        self.assertTrue(config.ignore_expired_pinned_cert)

    def test_validation_warnings(self):
        config = Config(pem_path=self.pem_path, ignore_expired_pinned_cert=True,
                        log_file_path=os.path.join(self.temp_dir, "missing", "certpin.log"))

        result = self.service.validate_config(config)

        self.assertTrue(result.is_valid)
        warned = {w.field for w in result.warnings}
        self.assertEqual(warned, {"host", "ignore_expired_pinned_cert", "log_file_path"})
        self.assertEqual(result.errors, [])

    def test_validation_keeps_errors_apart_from_warnings(self):
        config = Config(pem_path=os.path.join(self.temp_dir, "missing.pem"),
                        log_file_path=os.path.join(self.temp_dir, "certpin.log"))

        result = self.service.validate_config(config)

        self.assertFalse(result.is_valid)
        self.assertEqual([e.field for e in result.errors], ["pem_path"])
        self.assertEqual([w.field for w in result.warnings], ["host"])
        self.assertTrue(all(w.severity == "warning" for w in result.warnings))

    def test_create_default_config_file(self):
        path = os.path.join(self.temp_dir, "config", "default.properties")

        self.service.create_default_config_file(path)

        with open(path) as f:
            content = f.read()
        self.assertIn("[pin]", content)
        self.assertIn("ignore_expired_pinned_cert = false", content)
        self.assertIn("port = 443", content)


if __name__ == '__main__':
    unittest.main()
