"""
Tests for the logging service.
"""
import json
import sys
import logging
import os
import shutil
import tempfile
import unittest

from certpin.models.config import Config
from certpin.services.logging_service import JSONFormatter, LoggingService, PerformanceMonitor


class TestJSONFormatter(unittest.TestCase):
    """Test cases for JSONFormatter."""

    def test_format_record(self):
        record = logging.LogRecord(
            name="certpin.test", level=logging.WARNING, pathname=__file__, lineno=10,
            msg="Rejecting %s", args=("peer",), exc_info=None
        )
        record.extra_data = {'host': 'example.com'}

        entry = json.loads(JSONFormatter().format(record))

        self.assertEqual(entry['level'], "WARNING")
        self.assertEqual(entry['logger_name'], "certpin.test")
        self.assertEqual(entry['message'], "Rejecting peer")
        self.assertEqual(entry['extra_data'], {'host': 'example.com'})
        self.assertIsNone(entry['exception_info'])

    def test_format_exception(self):
        try:
            raise ValueError("bad chain")
        except ValueError:
            exc_info = sys.exc_info()

        record = logging.LogRecord(
            name="certpin.test", level=logging.ERROR, pathname=__file__, lineno=10,
            msg="failed", args=(), exc_info=exc_info
        )

        entry = json.loads(JSONFormatter().format(record))

        self.assertEqual(entry['exception_info']['type'], "ValueError")
        self.assertEqual(entry['exception_info']['message'], "bad chain")


class TestPerformanceMonitor(unittest.TestCase):
    """Test cases for PerformanceMonitor."""

    def test_measure_success_and_failure(self):
        monitor = PerformanceMonitor()

        with monitor.measure_operation("tls_handshake"):
            pass

        with self.assertRaises(RuntimeError):
            with monitor.measure_operation("tls_handshake"):
                raise RuntimeError("rejected")

        stats = monitor.get_operation_stats("tls_handshake")
        self.assertEqual(stats['total_calls'], 2)
        self.assertEqual(stats['success_count'], 1)
        self.assertEqual(stats['failure_count'], 1)
        self.assertEqual(monitor.timings("tls_handshake")[1].error, "RuntimeError: rejected")

    def test_stats_for_unknown_operation(self):
        self.assertEqual(PerformanceMonitor().get_operation_stats("nothing"), {})


class TestLoggingService(unittest.TestCase):
    """Test cases for LoggingService."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.root_logger = logging.getLogger()
        self.saved_handlers = self.root_logger.handlers[:]
        self.saved_level = self.root_logger.level

    def tearDown(self):
        for handler in self.root_logger.handlers[:]:
            handler.close()
            self.root_logger.removeHandler(handler)
        for handler in self.saved_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.saved_level)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_setup_writes_json_log(self):
        log_path = os.path.join(self.temp_dir, "logs", "certpin.log")
        service = LoggingService(Config(log_file_path=log_path, log_level="DEBUG"))

        service.log_with_context('warning', "Pin rejected", host="example.com")
        for handler in self.root_logger.handlers:
            handler.flush()

        self.assertEqual(self.root_logger.level, logging.DEBUG)
        self.assertEqual(len(self.root_logger.handlers), 3)
        with open(log_path) as f:
            entries = [json.loads(line) for line in f if line.strip()]
        rejected = [e for e in entries if e['message'] == "Pin rejected"]
        self.assertEqual(rejected[0]['extra_data'], {'host': "example.com"})
        self.assertTrue(os.path.exists(os.path.join(self.temp_dir, "logs", "certpin.errors.log")))

    def test_performance_stats(self):
        service = LoggingService(Config(log_file_path=os.path.join(self.temp_dir, "certpin.log")))

        with service.measure_performance("tls_handshake", {'host': 'example.com'}):
            pass

        stats = service.get_performance_stats()
        self.assertEqual(stats['total_calls'], 1)
        self.assertEqual(stats['success_count'], 1)
        self.assertEqual(service.performance_monitor.timings()[0].context, {'host': 'example.com'})
        self.assertEqual(service.get_performance_stats("chain_load"), {})


if __name__ == '__main__':
    unittest.main()
