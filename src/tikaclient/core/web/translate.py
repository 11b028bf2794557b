"""Translator backends and language codes for the translation endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from tikaclient.core.exceptions import ConfigurationError

_JVM_PACKAGE = "org.apache.tika.language.translate"


@dataclass(frozen=True)
class Translator:
    """
    A translator backend, identified by its JVM class name.

    Example:
        >>> Translator.GOOGLE.jvm_class
        'org.apache.tika.language.translate.GoogleTranslator'
        >>> Translator.other("org.apache.tika.language.translate.YandexTranslator")
    """

    jvm_class: str

    LINGO24: ClassVar[Translator]
    GOOGLE: ClassVar[Translator]

    @classmethod
    def other(cls, jvm_class: str) -> Translator:
        """Use another translator, given its full JVM class name."""
        if not jvm_class.strip():
            raise ConfigurationError("Translator class name cannot be empty")
        return cls(jvm_class=jvm_class.strip())

    @classmethod
    def from_name(cls, name: str) -> Translator:
        """
        Resolve a short name (``lingo24``, ``google``) or a full class name.

        Raises:
            ConfigurationError: If ``name`` is empty
        """
        key = name.strip().lower()
        if key == "lingo24":
            return cls.LINGO24
        if key == "google":
            return cls.GOOGLE
        return cls.other(name)

    def __str__(self) -> str:
        return self.jvm_class


Translator.LINGO24 = Translator(jvm_class=f"{_JVM_PACKAGE}.Lingo24Translator")
Translator.GOOGLE = Translator(jvm_class=f"{_JVM_PACKAGE}.GoogleTranslator")

# Common language codes
EN = "en"
DE = "de"
IT = "it"
FR = "fr"


def normalize_language(code: str) -> str:
    """Lower-case and strip a language code; empty codes are rejected."""
    normalized = code.strip().lower()
    if not normalized:
        raise ConfigurationError("Language code cannot be empty")
    if "/" in normalized:
        raise ConfigurationError(f"Invalid language code: {code!r}", language=code)
    return normalized


__all__ = ["Translator", "EN", "DE", "IT", "FR", "normalize_language"]
