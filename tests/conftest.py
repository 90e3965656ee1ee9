from concurrent.futures import ThreadPoolExecutor

import pytest

from ogpreview.config import get_settings
from ogpreview.transport import BackgroundLoop


@pytest.fixture
def results_queue():
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="results-queue")
    yield executor
    executor.shutdown(wait=True)


@pytest.fixture
def background_loop():
    with BackgroundLoop(name="test-transport") as background:
        yield background


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
