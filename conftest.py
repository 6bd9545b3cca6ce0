
import glob
import os


def pytest_generate_tests(metafunc):
    if "event_path" in metafunc.fixturenames:

        test_event_set = glob.glob(f'{os.path.dirname(__file__)}/tests/event_sets/tabulation_test/**/input', recursive=True)
        test_event_dirs = sorted(os.path.dirname(test_path) for test_path in test_event_set)

        metafunc.parametrize("event_path", test_event_dirs, ids=[os.path.basename(p) for p in test_event_dirs])
