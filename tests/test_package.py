"""Basic package tests to verify installation."""


def test_package_imports() -> None:
    """Verify the main package can be imported."""
    import iperfcompare

    assert iperfcompare.__version__


def test_config_module_imports() -> None:
    """Verify config module structure is correct."""
    from iperfcompare.config import (
        MAX_SOURCES,
        AppConfig,
        LoggingConfig,
        ServerConfig,
        UploadConfig,
        load_config,
    )

    assert MAX_SOURCES == 6
    assert AppConfig is not None
    assert UploadConfig is not None
    assert ServerConfig is not None
    assert LoggingConfig is not None
    assert load_config is not None


def test_pipeline_module_imports() -> None:
    """Verify the processing modules expose their entry points."""
    from iperfcompare.alignment import align, build_comparison, summarize
    from iperfcompare.ingestion import process_batch
    from iperfcompare.normalization import normalize
    from iperfcompare.schemas import AlignedSeriesSchema, ReducedSeriesSchema

    assert callable(normalize)
    assert callable(align)
    assert callable(summarize)
    assert callable(build_comparison)
    assert callable(process_batch)
    assert ReducedSeriesSchema is not None
    assert AlignedSeriesSchema is not None
