"""Tests for configuration endpoint models and translator backends."""

import pytest

from tikaclient.core.exceptions import ConfigurationError, ErrorKind, InvalidTypeNameError
from tikaclient.core.web.models import ConfigPath, Detector, MimeType, Parser
from tikaclient.core.web.translate import Translator, normalize_language


class TestConfigPath:
    """Tests for ConfigPath lookups."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("mime-types", ConfigPath.MIME_TYPES),
            ("detectors", ConfigPath.DETECTORS),
            ("parsers", ConfigPath.PARSERS),
            ("parsers/details", ConfigPath.PARSERS_DETAILS),
            ("parsers-details", ConfigPath.PARSERS_DETAILS),
        ],
    )
    def test_from_name(self, name: str, expected: ConfigPath) -> None:
        """Test lookup by path and by CLI name."""
        assert ConfigPath.from_name(name) is expected

    def test_unknown_name(self) -> None:
        """Test that unknown names are invalid type names."""
        with pytest.raises(InvalidTypeNameError) as exc_info:
            ConfigPath.from_name("languages")
        assert exc_info.value.kind is ErrorKind.INVALID_TYPE_NAME
        assert "parsers-details" in exc_info.value.context["expected"]


class TestMimeType:
    """Tests for the flattened mime type catalog."""

    def test_from_catalog(self) -> None:
        """Test that map keys become identifiers."""
        catalog = {
            "application/pdf": {
                "supertype": "application/octet-stream",
                "alias": ["application/x-pdf"],
                "parser": "org.apache.tika.parser.pdf.PDFParser",
            },
            "text/plain": {},
        }
        records = MimeType.from_catalog(catalog)
        assert records[0] == MimeType(
            identifier="application/pdf",
            supertype="application/octet-stream",
            alias=["application/x-pdf"],
            parser="org.apache.tika.parser.pdf.PDFParser",
        )
        assert records[1].identifier == "text/plain"
        assert records[1].alias == []
        assert records[1].supertype is None


class TestTrees:
    """Tests for detector and parser trees."""

    def test_detector(self) -> None:
        """Test a nested detector tree."""
        detector = Detector.model_validate(
            {
                "name": "org.apache.tika.detect.DefaultDetector",
                "composite": True,
                "children": [{"name": "org.apache.tika.mime.MimeTypes", "composite": False}],
            }
        )
        assert detector.children[0].name == "org.apache.tika.mime.MimeTypes"
        assert detector.children[0].children == []

    def test_parser_aliases(self) -> None:
        """Test that supportedTypes maps to supported_types."""
        parser = Parser.model_validate(
            {
                "name": "org.apache.tika.parser.DefaultParser",
                "composite": True,
                "children": [
                    {
                        "name": "org.apache.tika.parser.txt.TXTParser",
                        "decorated": True,
                        "supportedTypes": ["text/plain"],
                    }
                ],
            }
        )
        child = parser.children[0]
        assert child.decorated is True
        assert child.composite is False
        assert child.supported_types == ["text/plain"]


class TestTranslator:
    """Tests for translator backends."""

    def test_known_backends(self) -> None:
        """Test the built-in backend class names."""
        assert Translator.LINGO24.jvm_class == "org.apache.tika.language.translate.Lingo24Translator"
        assert Translator.GOOGLE.jvm_class == "org.apache.tika.language.translate.GoogleTranslator"

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("lingo24", Translator.LINGO24), ("Google", Translator.GOOGLE)],
    )
    def test_from_short_name(self, name: str, expected: Translator) -> None:
        """Test short names."""
        assert Translator.from_name(name) == expected

    def test_other(self) -> None:
        """Test a full class name."""
        translator = Translator.from_name("com.example.MyTranslator")
        assert translator == Translator.other("com.example.MyTranslator")
        assert str(translator) == "com.example.MyTranslator"

    def test_empty(self) -> None:
        """Test that an empty class name is rejected."""
        with pytest.raises(ConfigurationError):
            Translator.from_name("  ")


class TestNormalizeLanguage:
    """Tests for language code normalization."""

    def test_normalizes(self) -> None:
        """Test case and whitespace folding."""
        assert normalize_language(" DE ") == "de"

    @pytest.mark.parametrize("code", ["", "  ", "en/fr"])
    def test_rejects(self, code: str) -> None:
        """Test invalid codes."""
        with pytest.raises(ConfigurationError):
            normalize_language(code)
