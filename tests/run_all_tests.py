#!/usr/bin/env python3
"""
Test runner for the Math Quiz Bot.
Runs all unit and integration tests, or a single category.

Usage:
    python tests/run_all_tests.py [unit|integration|engine|session|data|config|bot]
"""
import unittest
import sys
import time
from pathlib import Path

# Project root, so that math_quiz and tests import as packages
sys.path.insert(0, str(Path(__file__).parent.parent))

TEST_MODULES = {
    'engine': 'tests.test_quiz_engine',
    'session': 'tests.test_quiz_session',
    'data': 'tests.test_data_manager',
    'config': 'tests.test_config_manager',
    'bot': 'tests.test_bot_discord_integration',
    'integration': 'tests.test_integration_comprehensive',
}

CATEGORIES = {
    'unit': ['engine', 'session', 'data', 'config', 'bot'],
    'integration': ['integration'],
}


def load_suite(module_names):
    """Load the named test modules into one suite."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    for module_name in module_names:
        try:
            suite.addTest(loader.loadTestsFromName(module_name))
            print(f"✓ Loaded tests from {module_name}")
        except Exception as e:
            print(f"✗ Failed to load {module_name}: {e}")

    return suite


def run_test_suite(module_names):
    """Run the given test modules and print a summary report."""
    print("=" * 70)
    print("Math Quiz Bot - Test Suite")
    print("=" * 70)

    suite = load_suite(module_names)

    runner = unittest.TextTestRunner(
        verbosity=2,
        stream=sys.stdout,
        buffer=True
    )

    start_time = time.time()
    result = runner.run(suite)
    end_time = time.time()

    total_tests = result.testsRun
    failures = len(result.failures)
    errors = len(result.errors)
    skipped = len(result.skipped)
    passed = total_tests - failures - errors - skipped

    print("\n" + "=" * 70)
    print("Test Summary Report")
    print("=" * 70)
    print(f"Total Tests Run: {total_tests}")
    print(f"Passed: {passed}")
    print(f"Failed: {failures}")
    print(f"Errors: {errors}")
    print(f"Skipped: {skipped}")
    print(f"Success Rate: {(passed/total_tests)*100:.1f}%" if total_tests > 0 else "N/A")
    print(f"Execution Time: {end_time - start_time:.2f} seconds")

    return failures == 0 and errors == 0


if __name__ == '__main__':
    if len(sys.argv) > 1:
        category = sys.argv[1]
        keys = CATEGORIES.get(category, [category])
        unknown = [key for key in keys if key not in TEST_MODULES]
        if unknown:
            print(f"Unknown category: {category}")
            print(f"Available categories: {', '.join(list(CATEGORIES) + list(TEST_MODULES))}")
            sys.exit(2)
        success = run_test_suite([TEST_MODULES[key] for key in keys])
    else:
        success = run_test_suite(list(TEST_MODULES.values()))

    sys.exit(0 if success else 1)
