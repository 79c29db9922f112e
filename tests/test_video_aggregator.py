"""
Unit tests for the catalog aggregator.

Covers the extension allow-list, strict locale filtering, declaration-order
fallback, filename titles, search and pagination pass-through.
"""
import pytest

from reelbox.core.errors import MetadataUnavailable, UpstreamUnavailable, ValidationError
from reelbox.schemas.schemas import VideoListQuery
from reelbox.services.catalog.video_aggregator import (
    UNTITLED_PLACEHOLDER,
    VideoAggregator,
    is_video_file,
    title_from_key,
)


def test_is_video_file_allow_list():
    assert is_video_file("a.mp4")
    assert is_video_file("folder/CLIP.MKV")
    assert is_video_file("live/index.m3u8")
    assert not is_video_file("a.mp4.metadata.json")
    assert not is_video_file("b.txt")
    assert not is_video_file("")


def test_title_from_key():
    assert title_from_key("folder/My Clip.mp4") == "My Clip"
    assert title_from_key("archive.tar.mp4") == "archive.tar"
    assert title_from_key("noext") == "noext"
    assert title_from_key("folder/.mp4") == UNTITLED_PLACEHOLDER


async def test_extension_filter_drops_sidecars_and_stray_files(object_store, aggregator):
    object_store.add("a.mp4")
    object_store.add("a.mp4.metadata.json", b"{}", "application/json")
    object_store.add("b.txt", b"hello", "text/plain")

    result = await aggregator.list_videos(VideoListQuery())

    assert [v.key for v in result.videos] == ["a.mp4"]
    assert result.key_count == 1


async def test_fallback_title_without_metadata(object_store, aggregator):
    object_store.add("folder/My Clip.mp4")

    result = await aggregator.list_videos(VideoListQuery())

    video = result.videos[0]
    assert video.title == "My Clip"
    assert video.description == ""
    assert video.cover_url is None
    assert video.available_locales == []


async def test_locale_filter_includes_titled_video(object_store, metadata_store, aggregator):
    object_store.add("v1.mp4")
    await metadata_store.upsert("v1.mp4", "en", title="  Episode One  ", description=" Pilot ")

    result = await aggregator.list_videos(VideoListQuery(locale="en"))

    assert len(result.videos) == 1
    assert result.videos[0].title == "Episode One"
    assert result.videos[0].description == "Pilot"


async def test_locale_filter_is_strict(object_store, metadata_store, aggregator):
    object_store.add("titled.mp4")
    object_store.add("no-metadata.mp4")
    object_store.add("other-locale.mp4")
    await metadata_store.upsert("titled.mp4", "zh", title="第一集")
    await metadata_store.upsert("other-locale.mp4", "en", title="English only")

    result = await aggregator.list_videos(VideoListQuery(locale="zh"))

    assert [v.key for v in result.videos] == ["titled.mp4"]


async def test_whitespace_title_counts_as_missing(object_store, metadata_store, aggregator):
    object_store.add("blank.mp4")
    await metadata_store.upsert("blank.mp4", "en", title="   ")

    assert (await aggregator.list_videos(VideoListQuery(locale="en"))).videos == []
    unscoped = await aggregator.list_videos(VideoListQuery())
    assert unscoped.videos[0].title == "blank"


async def test_unscoped_listing_uses_declaration_order(object_store, metadata_store, aggregator):
    object_store.add("v.mp4")
    await metadata_store.upsert("v.mp4", "fr", title="Titre", description="fr desc")
    await metadata_store.upsert("v.mp4", "en", title="Title", description="en desc", cover_url="covers/v-en.jpg")

    video = (await aggregator.list_videos(VideoListQuery())).videos[0]

    # en is declared before fr
    assert video.title == "Title"
    assert video.description == "en desc"
    assert video.cover_url == "covers/v-en.jpg"
    assert video.available_locales == ["en", "fr"]


async def test_search_matches_any_available_locale_title(object_store, metadata_store, aggregator):
    object_store.add("ep1.mp4")
    await metadata_store.upsert("ep1.mp4", "en", title="Episode One")

    hit = await aggregator.list_videos(VideoListQuery(title="EPISODE"))
    miss = await aggregator.list_videos(VideoListQuery(title="zzz"))

    assert [v.key for v in hit.videos] == ["ep1.mp4"]
    assert miss.videos == []


async def test_search_matches_other_locale_title_under_locale_filter(object_store, metadata_store, aggregator):
    object_store.add("ep1.mp4")
    await metadata_store.upsert("ep1.mp4", "zh", title="第一集")
    await metadata_store.upsert("ep1.mp4", "en", title="Episode One")

    result = await aggregator.list_videos(VideoListQuery(locale="zh", title="episode"))

    assert [v.title for v in result.videos] == ["第一集"]


async def test_search_matches_raw_key(object_store, aggregator):
    object_store.add("shows/holiday-special.mp4")
    object_store.add("shows/other.mp4")

    result = await aggregator.list_videos(VideoListQuery(title="SHOWS/HOLIDAY"))

    assert [v.key for v in result.videos] == ["shows/holiday-special.mp4"]


async def test_blank_search_term_is_ignored(object_store, aggregator):
    object_store.add("a.mp4")
    object_store.add("b.mp4")

    result = await aggregator.list_videos(VideoListQuery(title="   "))

    assert result.key_count == 2


async def test_pagination_passes_through(object_store, aggregator):
    object_store.add("a.mp4")
    object_store.add("b.mp4")
    object_store.is_truncated = True
    object_store.next_token = "token-2"

    result = await aggregator.list_videos(
        VideoListQuery(prefix="a", max_keys=5, continuation_token="token-1", title="zzz")
    )

    assert object_store.list_calls == [("a", 5, "token-1")]
    assert result.videos == []
    # Still truncated: the underlying listing has more pages
    assert result.is_truncated is True
    assert result.next_continuation_token == "token-2"


@pytest.mark.parametrize("max_keys", [0, 1001, -5])
async def test_max_keys_out_of_range(aggregator, max_keys):
    with pytest.raises(ValidationError) as exc_info:
        await aggregator.list_videos(VideoListQuery(max_keys=max_keys))
    assert exc_info.value.field == "maxKeys"


async def test_unknown_locale_rejected(aggregator):
    with pytest.raises(ValidationError) as exc_info:
        await aggregator.list_videos(VideoListQuery(locale="de"))
    assert exc_info.value.field == "locale"


async def test_upstream_failure_is_an_error(object_store, aggregator):
    object_store.fail_list = True
    with pytest.raises(UpstreamUnavailable):
        await aggregator.list_videos(VideoListQuery())


async def test_failed_sidecar_degrades_to_filename(object_store, metadata_store, aggregator):
    object_store.add("ok.mp4")
    object_store.add("broken.mp4")
    await metadata_store.upsert("ok.mp4", "en", title="Fine")
    await metadata_store.upsert("broken.mp4", "en", title="Hidden")
    object_store.fail_get_keys.add("broken.mp4.metadata.json")

    result = await aggregator.list_videos(VideoListQuery())

    titles = {v.key: v.title for v in result.videos}
    assert titles == {"ok.mp4": "Fine", "broken.mp4": "broken"}


async def test_metadata_outage_does_not_abort_listing(object_store):
    class DownMetadataStore:
        async def get_batch(self, keys):
            raise MetadataUnavailable()

    object_store.add("clip.mp4")
    aggregator = VideoAggregator(object_store, DownMetadataStore())

    result = await aggregator.list_videos(VideoListQuery())

    assert [v.title for v in result.videos] == ["clip"]


async def test_unexpected_sidecar_error_degrades_to_filename(object_store, metadata_store, aggregator):
    object_store.add("a.mp4")
    object_store.add("b.mp4")
    await metadata_store.upsert("a.mp4", "en", title="Alpha")
    await metadata_store.upsert("b.mp4", "en", title="Bravo")
    store_get = object_store.get_object

    async def flaky_get(key):
        if key == "b.mp4.metadata.json":
            raise RuntimeError("connection reset")
        return await store_get(key)

    object_store.get_object = flaky_get

    result = await aggregator.list_videos(VideoListQuery())

    assert {v.key: v.title for v in result.videos} == {"a.mp4": "Alpha", "b.mp4": "b"}
