import discord

from bot.discord_render import (
    EMBED_COLOR,
    EMBED_TOTAL_MAX,
    MAX_EMBEDS,
    Section,
    build_embeds,
    chunk_text,
    parse_response_sections,
    strip_poster_directives,
)


POSTER_A = "https://image.tmdb.org/t/p/w342/a.jpg"
POSTER_B = "https://image.tmdb.org/t/p/w342/b.jpg"


def test_short_text_is_single_chunk():
    assert chunk_text("hello") == ["hello"]


def test_unbroken_text_is_hard_cut():
    chunks = chunk_text("a" * 4500)
    assert [len(c) for c in chunks] == [2000, 2000, 500]


def test_chunks_prefer_newlines():
    text = "x" * 1500 + "\n" + "y" * 1000
    chunks = chunk_text(text)
    assert chunks == ["x" * 1500, "y" * 1000]


def test_early_newline_is_ignored_in_favour_of_space():
    # Newline sits in the first half of the window, so the last space wins
    text = "a" * 100 + "\n" + "b" * 1700 + " " + "c" * 500
    chunks = chunk_text(text)
    assert chunks[0] == "a" * 100 + "\n" + "b" * 1700
    assert chunks[1] == "c" * 500


def test_every_chunk_within_limit():
    words = " ".join(f"word{i}" for i in range(1500))
    chunks = chunk_text(words)
    assert all(len(c) <= 2000 for c in chunks)
    assert " ".join(chunks) == words


def test_no_poster_is_one_plain_section():
    assert parse_response_sections("  just text  ") == [Section("just text")]


def test_single_poster_attaches_to_whole_text():
    text = f"Inception (2010)\n[POSTER:{POSTER_A}]\nWant me to request it?"
    sections = parse_response_sections(text)
    assert len(sections) == 1
    assert sections[0].poster_url == POSTER_A
    assert "[POSTER:" not in sections[0].text
    assert sections[0].text.endswith("Want me to request it?")


def test_multiple_posters_split_sections():
    text = (
        f"1. First movie with a long enough description here\n[POSTER:{POSTER_A}]\n---\n"
        f"2. Second movie with another description\n[POSTER:{POSTER_B}]\n"
        "ok"
    )
    sections = parse_response_sections(text)
    assert [s.poster_url for s in sections] == [POSTER_A, POSTER_B]
    assert sections[0].text.startswith("1. First movie")
    # The short trailing remainder has no poster and is dropped
    assert len(sections) == 2


def test_strip_poster_directives():
    assert strip_poster_directives(f"A [POSTER:{POSTER_A}] B") == "A  B"
    # Only https poster URLs are recognised
    assert strip_poster_directives("[POSTER:http://x/y.jpg]") == "[POSTER:http://x/y.jpg]"


def test_build_embeds_sets_thumbnail_and_caps_count():
    sections = [Section(f"item {i}", POSTER_A if i % 2 == 0 else None) for i in range(12)]
    embeds = build_embeds(sections)
    assert len(embeds) == MAX_EMBEDS
    assert all(isinstance(e, discord.Embed) for e in embeds)
    assert embeds[0].thumbnail.url == POSTER_A
    assert embeds[1].thumbnail.url is None
    assert embeds[0].description == "item 0"
    assert embeds[0].colour.value == EMBED_COLOR


def test_embed_description_truncated():
    embeds = build_embeds([Section("z" * 5000, POSTER_A)])
    assert len(embeds[0].description) == 4096


def test_embeds_fit_message_total():
    sections = [Section(str(i) * 4096, POSTER_A) for i in range(MAX_EMBEDS)]
    embeds = build_embeds(sections)
    assert sum(len(e.description) for e in embeds) == EMBED_TOTAL_MAX
    assert [len(e.description) for e in embeds] == [4096, 1904]
