import pytest

from cluebowl.channels.test_channel import MockChannel
from cluebowl.messages.localization import Localization
from cluebowl.users.test_user import MockUser


@pytest.fixture
def locales_dir(tmp_path):
    en = tmp_path / "en"
    en.mkdir()
    (en / "game.ftl").write_text(
        "turn-go = Ready { $performer }? GO!\ngame-over = Game over!\n",
        encoding="utf-8",
    )
    fr = tmp_path / "fr"
    fr.mkdir()
    (fr / "game.ftl").write_text("turn-go = Prêt { $performer } ? Partez !\n", encoding="utf-8")
    Localization.init(tmp_path)
    return tmp_path


class TestLocalization:
    def test_variables_have_no_bidi_marks(self):
        text = Localization.get("en", "turn-go", performer="@Bob")
        assert text == "Ready @Bob? GO!"

    def test_translated_message(self, locales_dir):
        assert Localization.get("fr", "turn-go", performer="@Bob") == "Prêt @Bob ? Partez !"

    def test_missing_translation_uses_english(self, locales_dir):
        assert Localization.get("fr", "game-over") == "Game over!"

    def test_unknown_locale_uses_english(self, locales_dir):
        assert Localization.get("de", "game-over") == "Game over!"

    def test_unknown_message_returns_its_id(self):
        assert Localization.get("en", "no-such-message") == "no-such-message"

    def test_available_locales(self, locales_dir):
        assert Localization.available_locales() == ["en", "fr"]

    def test_preload_bundles(self, locales_dir):
        Localization.preload_bundles()
        assert set(Localization._bundles) == {"en", "fr"}

    def test_format_list_and(self):
        assert Localization.format_list_and("en", []) == ""
        assert Localization.format_list_and("en", ["@a"]) == "@a"
        assert Localization.format_list_and("en", ["@a", "@b", "@c"]) == "@a, @b, and @c"

    def test_users_and_channels_render_in_their_locale(self, locales_dir):
        user = MockUser("Zoe", locale="fr")
        user.speak_l("turn-go", performer="@Zoe")
        assert user.get_last_spoken() == "Prêt @Zoe ? Partez !"

        channel = MockChannel()
        channel.speak_l("turn-go", performer="@Zoe")
        assert channel.get_last_spoken() == "Ready @Zoe? GO!"
