import logging

import pytest


@pytest.fixture(autouse=True)
def reset_root_logging():
    """main() reconfigures the root logger; drop its handlers after each test"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
