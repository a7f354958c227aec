from core.app_version import get_app_version


def test_version_matches_pyproject():
    assert get_app_version() == "0.4.0"


def test_routine_metadata_carries_version():
    from extractors.browser.ie_legacy import IEHistoryExtractor

    assert IEHistoryExtractor().metadata.version == get_app_version()
