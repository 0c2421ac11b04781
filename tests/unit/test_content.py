"""
Unit Tests for the Content Provider

Tests loading, default creation and recovery of the content file.
"""

import orjson
import pytest

from speechcast.content import DEFAULT_SECTIONS, ContentProvider, default_catalog
from speechcast.core.errors import ContentLoadError


class TestDefaultCatalog:
    """Test the built-in presentation."""

    def test_default_catalog_languages(self):
        catalog = default_catalog()

        assert catalog.languages == ["en", "fr", "de"]
        assert catalog.section_count == 5

    def test_default_catalog_is_a_copy(self):
        catalog = default_catalog()
        catalog.sections["en"].append("extra")

        assert len(DEFAULT_SECTIONS["en"]) == 5


class TestContentProviderLoad:
    """Test ContentProvider.load."""

    @pytest.mark.asyncio
    async def test_load_creates_defaults_when_missing(self, content_file):
        provider = ContentProvider(content_file)

        catalog = await provider.load()

        assert content_file.exists()
        assert catalog.section_count == 5
        assert orjson.loads(content_file.read_bytes()) == DEFAULT_SECTIONS

    @pytest.mark.asyncio
    async def test_load_existing_file(self, write_content, content_file):
        write_content({"en": ["A", "B"], "fr": ["Un"]})

        catalog = await ContentProvider(content_file).load()

        assert catalog.sections == {"en": ["A", "B"], "fr": ["Un"]}

    @pytest.mark.asyncio
    async def test_load_legacy_file(self, write_content, content_file):
        write_content({"sections": ["Only English"]})

        catalog = await ContentProvider(content_file).load()

        assert catalog.sections == {"en": ["Only English"]}

    @pytest.mark.asyncio
    async def test_load_corrupt_file_regenerates(self, content_file):
        content_file.write_text("{not json")

        catalog = await ContentProvider(content_file).load()

        assert catalog.section_count == 5
        assert orjson.loads(content_file.read_bytes()) == DEFAULT_SECTIONS

    @pytest.mark.asyncio
    async def test_load_without_default_language_regenerates(self, write_content, content_file):
        write_content({"fr": ["Un"]})

        catalog = await ContentProvider(content_file).load()

        assert "en" in catalog.languages
        assert catalog.section_count == 5

    @pytest.mark.asyncio
    async def test_load_unrecoverable_raises(self, tmp_path):
        """A directory can be neither read nor replaced."""
        target = tmp_path / "speech.json"
        target.mkdir()

        with pytest.raises(ContentLoadError):
            await ContentProvider(target).load()

        assert target.is_dir()
        assert not list(tmp_path.glob(".speech.json.*.tmp"))


class TestContentProviderSave:
    """Test ContentProvider.save."""

    @pytest.mark.asyncio
    async def test_save_then_load(self, content_file, small_catalog):
        provider = ContentProvider(content_file)

        await provider.save(small_catalog)
        loaded = await provider.load()

        assert loaded == small_catalog

    @pytest.mark.asyncio
    async def test_save_creates_parent_directories(self, tmp_path, small_catalog):
        target = tmp_path / "nested" / "dir" / "speech.json"

        await ContentProvider(target).save(small_catalog)

        assert target.exists()

    @pytest.mark.asyncio
    async def test_save_leaves_no_temp_files(self, content_file, small_catalog):
        await ContentProvider(content_file).save(small_catalog)

        assert [p.name for p in content_file.parent.iterdir()] == ["speech.json"]

    @pytest.mark.asyncio
    async def test_reset_to_defaults_overwrites(self, write_content, content_file):
        write_content({"en": ["Custom"]})
        provider = ContentProvider(content_file)

        catalog = await provider.reset_to_defaults()

        assert catalog.section_count == 5
        assert (await provider.load()).section_count == 5

    def test_path_property(self, content_file):
        assert ContentProvider(str(content_file)).path == content_file
