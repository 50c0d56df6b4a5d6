"""Fluent message catalogs, one bundle per locale directory."""

import logging
from pathlib import Path

from fluent_compiler.bundle import FluentBundle
from babel.lists import format_list

logger = logging.getLogger(__name__)

DEFAULT_LOCALES_DIR = Path(__file__).parent.parent / "locales"
FALLBACK_LOCALE = "en"

# Fluent wraps every placeable in FIRST STRONG ISOLATE / POP DIRECTIONAL ISOLATE
_BIDI_CHARS = "\u2068\u2069"


class Localization:
    """
    Renders game text from ``<locales_dir>/<locale>/*.ftl``.

    Bundles are compiled lazily and cached per requested locale. A locale
    without a directory uses the English bundle, and a message missing from
    a translated bundle is rendered from English instead.
    """

    _bundles: dict[str, FluentBundle] = {}
    _locales_dir: Path | None = None

    @classmethod
    def init(cls, locales_dir: Path | str | None = None) -> None:
        """Point at a locales directory (the bundled one by default) and drop cached bundles."""
        cls._locales_dir = Path(locales_dir) if locales_dir else DEFAULT_LOCALES_DIR
        cls._bundles = {}

    @classmethod
    def available_locales(cls) -> list[str]:
        """Locales that have their own directory of message files."""
        if cls._locales_dir is None:
            return []
        return sorted(d.name for d in cls._locales_dir.iterdir() if d.is_dir())

    @classmethod
    def preload_bundles(cls) -> None:
        """Compile every locale up front so broken .ftl files fail at startup."""
        for locale in cls.available_locales():
            cls._get_bundle(locale)

    @classmethod
    def _get_bundle(cls, locale: str) -> FluentBundle:
        if locale in cls._bundles:
            return cls._bundles[locale]

        if cls._locales_dir is None:
            raise RuntimeError(
                "Localization not initialized. Call Localization.init() first."
            )

        bundle_locale = locale
        locale_dir = cls._locales_dir / locale
        if not locale_dir.is_dir():
            bundle_locale = FALLBACK_LOCALE
            locale_dir = cls._locales_dir / FALLBACK_LOCALE
            if not locale_dir.is_dir():
                raise RuntimeError(f"No locale files found for {locale} or {FALLBACK_LOCALE}")

        sources = [f.read_text(encoding="utf-8") for f in sorted(locale_dir.glob("*.ftl"))]
        if not sources:
            raise RuntimeError(f"No .ftl files found in {locale_dir}")

        logger.debug("Compiling %d message files for %s", len(sources), bundle_locale)
        bundle = FluentBundle.from_string(bundle_locale, "\n".join(sources))
        cls._bundles[locale] = bundle
        return bundle

    @classmethod
    def get(cls, locale: str, message_id: str, **kwargs) -> str:
        """
        Render a message for one locale.

        Args:
            locale: The reader's locale code (e.g. 'en').
            message_id: The message ID from the .ftl files.
            **kwargs: Fluent variables for the message.

        Returns:
            The rendered text, or the message ID itself if it can't be rendered.
        """
        try:
            bundle = cls._get_bundle(locale)
            if not bundle.has_message(message_id) and locale != FALLBACK_LOCALE:
                logger.debug("%s has no %s, using %s", locale, message_id, FALLBACK_LOCALE)
                bundle = cls._get_bundle(FALLBACK_LOCALE)
            text, errors = bundle.format(message_id, kwargs)
        except Exception:
            logger.exception("Could not render %s for locale %s", message_id, locale)
            return message_id

        for error in errors:
            logger.warning("Fluent error in %s/%s: %s", locale, message_id, error)
        for char in _BIDI_CHARS:
            text = text.replace(char, "")
        return text

    @classmethod
    def format_list_and(cls, locale: str, items: list[str]) -> str:
        """Join names the way the locale does, e.g. "@a, @b, and @c"."""
        if not items:
            return ""
        return format_list(items, style="standard", locale=locale)
