import threading

import pytest

from bibkit.errors import RegistryError
from bibkit.registry import BibRegistry, FieldName, default_registry


def test_standard_types_are_registered():
    article = default_registry.get_type("ARTICLE")

    assert article is not None
    assert article.required == (FieldName.AUTHOR, FieldName.TITLE, FieldName.JOURNAL, FieldName.YEAR)
    assert article.allows("doi")
    assert not article.allows("school")
    assert default_registry.get_type("misc").required == ()
    assert len(default_registry.type_names()) == 14


def test_aliases_resolve_case_insensitively():
    assert default_registry.resolve_alias("JournalTitle") == "journal"
    assert default_registry.resolve_alias("Title") == "title"


def test_custom_types_and_aliases():
    registry = BibRegistry()
    definition = registry.register_custom_type("Dataset", required=["Title", "journaltitle"], optional=["url"])
    registry.register_field_alias("repo", "url")

    assert registry.is_known_type("dataset")
    assert definition.required == ("title", "journal")
    assert registry.resolve_alias("REPO") == "url"
    assert not default_registry.is_known_type("dataset")


def test_empty_registry_has_no_types():
    registry = BibRegistry(include_standard=False)

    assert registry.type_names() == []
    assert registry.aliases() == {}


def test_invalid_alias_registration():
    registry = BibRegistry()

    with pytest.raises(RegistryError):
        registry.register_field_alias("", "title")
    with pytest.raises(RegistryError):
        registry.register_field_alias("title", "Title")
    with pytest.raises(RegistryError):
        registry.register_custom_type("  ")


def test_concurrent_registration_keeps_every_write():
    registry = BibRegistry()

    def register(worker: int) -> None:
        for index in range(50):
            registry.register_field_alias(f"alias-{worker}-{index}", "note")
            registry.resolve_alias("journaltitle")

    threads = [threading.Thread(target=register, args=(worker,)) for worker in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    aliases = registry.aliases()
    assert sum(1 for name in aliases if name.startswith("alias-")) == 8 * 50
