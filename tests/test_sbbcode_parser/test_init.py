"""Test module for sbbcode_parser package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import sbbcode_parser

    # Assert
    assert sbbcode_parser is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import sbbcode_parser

    # Assert
    assert isinstance(sbbcode_parser.__version__, str)
    assert sbbcode_parser.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    # Arrange & Act
    import sbbcode_parser

    # Assert
    assert sbbcode_parser.__author__ == "SBBCode Parser Team"


def test_package_all_exports() -> None:
    """Test that every name in __all__ is importable from the package."""
    # Arrange & Act
    import sbbcode_parser

    # Assert
    for name in sbbcode_parser.__all__:
        assert hasattr(sbbcode_parser, name), name
    assert "parse" in sbbcode_parser.__all__
    assert "SBBCodeParser" in sbbcode_parser.__all__
