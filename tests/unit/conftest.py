"""Shared fixtures for unit tests: sample pages and ready-made components."""

from __future__ import annotations

import pytest

from anchormark.config import (
    AnchorConfig,
    LocatorConfig,
    MarkerConfig,
    Settings,
    StoreConfig,
)
from anchormark.dom.nodes import Document
from anchormark.dom.parse import parse_html
from anchormark.highlights.backends import MemoryBackend
from anchormark.highlights.store import HighlightStore

# The story paragraph flattens (inside <article>) to:
# "Animals The farmer said the quick brown fox jumped over the lazy dog.
#  Later, the dog slept in the warm sun."
FOX_PAGE = """<!DOCTYPE html>
<html>
<head><title>Fox</title></head>
<body>
  <nav>Home | About</nav>
  <article id="story">
    <h1>Animals</h1>
    <p>The farmer said the quick brown fox jumped over the lazy dog.</p>
    <p>Later, <em>the dog</em> slept in the <b>warm</b> sun.</p>
  </article>
</body>
</html>
"""

# Same visible words, different incidental whitespace
FOX_PAGE_REFLOWED = """<html><body><nav>Home | About</nav>
<article id="story"><h1>Animals</h1>
<p>The   farmer said
      the quick
  brown    fox jumped over the lazy dog.</p>
<p>Later, <em>the dog</em> slept in the <b>warm</b> sun.</p></article></body></html>
"""

# "said " became "stated "
FOX_PAGE_EDITED = FOX_PAGE.replace("farmer said", "farmer stated")

# An advert inserted ahead of the story paragraph
FOX_PAGE_WITH_AD = FOX_PAGE.replace(
    "<h1>Animals</h1>",
    "<h1>Animals</h1>\n    <p>Advertisement: buy one fox, get one free.</p>",
)

# Highlighting "bold middle italic" touches three text nodes
FORMATTED_PAGE = "<p>Start <b>bold</b> middle <i>italic</i> end</p>"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        anchor=AnchorConfig(),
        locator=LocatorConfig(),
        markers=MarkerConfig(),
        store=StoreConfig(timeout_seconds=1.0),
    )


@pytest.fixture
def fox_document() -> Document:
    return parse_html(FOX_PAGE)


@pytest.fixture
def formatted_document() -> Document:
    return parse_html(FORMATTED_PAGE)


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(memory_backend: MemoryBackend, settings: Settings) -> HighlightStore:
    return HighlightStore(memory_backend, settings.store)
