import json
import unittest

from earlywarning.error_handling.errors import (
    ErrorCategory,
    ErrorSeverity,
    ConfigurationError,
    DataLoadError,
    categorize_error,
    assess_severity,
    extract_error_details
)


class TestErrorClassification(unittest.TestCase):
    def test_own_errors_keep_category(self):
        error = ConfigurationError("csd_window must be >= 1", parameter='csd_window', value=0)
        self.assertEqual(categorize_error(error), ErrorCategory.CONFIGURATION_ERROR)
        self.assertEqual(assess_severity(error, ErrorCategory.CONFIGURATION_ERROR), ErrorSeverity.HIGH)

    def test_foreign_errors(self):
        self.assertEqual(categorize_error(FileNotFoundError('x.csv')), ErrorCategory.DATA_ERROR)
        self.assertEqual(categorize_error(RuntimeError('singular matrix')), ErrorCategory.ANALYSIS_ERROR)
        self.assertEqual(categorize_error(RuntimeError('boom')), ErrorCategory.SYSTEM_ERROR)
        self.assertEqual(assess_severity(MemoryError(), ErrorCategory.SYSTEM_ERROR), ErrorSeverity.CRITICAL)

    def test_details_are_json(self):
        details = json.loads(extract_error_details(DataLoadError("no prices", parameter='column', value='Close')))
        self.assertEqual(details['error_type'], 'DataLoadError')
        self.assertEqual(details['category'], 'data_error')
        self.assertEqual(details['value'], "'Close'")

        details = json.loads(extract_error_details(KeyError('Close')))
        self.assertEqual(details['category'], 'system_error')
