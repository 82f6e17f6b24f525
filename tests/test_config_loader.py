import pytest

from news_enricher.utils.config_loader import ConfigError, load_sources_config


def _write(tmp_path, text):
    path = tmp_path / "sources.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_loads_sources_and_categories(tmp_path):
    path = _write(
        tmp_path,
        """
sources:
  - name: BBC
    url: http://feeds.bbci.co.uk/news/world/rss.xml
    type: rss
  - name: ESPN
    url: https://www.espn.com/espn/rss/news
    type: rss
    max_items: 5
    enabled: false
categories:
  sports: [Match, goal]
  science: [lab]
unknown_key: ignored
""",
    )
    config = load_sources_config(path)
    assert [s.name for s in config.sources] == ["BBC", "ESPN"]
    assert config.sources[1].max_items == 5
    assert [s.name for s in config.enabled_sources] == ["BBC"]
    assert config.categories == {"sports": ["match", "goal"], "science": ["lab"]}


def test_empty_file_gives_empty_config(tmp_path):
    config = load_sources_config(_write(tmp_path, ""))
    assert config.sources == []
    assert config.categories is None


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_sources_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "entry",
    [
        "{name: x, url: 'https://ex.com/feed'}",
        "{name: x, url: 'https://ex.com/feed', type: atom}",
        "{name: x, url: 'ex.com/feed', type: rss}",
        "{name: x, url: 'https://ex.com/feed', type: rss, max_items: 0}",
        "{name: x, url: 'https://ex.com/feed', type: rss, enabled: 'yes please'}",
    ],
)
def test_invalid_source_entries(tmp_path, entry):
    with pytest.raises(ConfigError):
        load_sources_config(_write(tmp_path, f"sources:\n  - {entry}\n"))


@pytest.mark.parametrize(
    "text",
    [
        "sources: {name: x}\n",
        "sources:\n  - just-a-string\n",
        "categories: [a, b]\n",
        "categories:\n  sports: goal\n",
        "- a\n- b\n",
        "sources: [\n",
    ],
)
def test_invalid_documents(tmp_path, text):
    with pytest.raises(ConfigError):
        load_sources_config(_write(tmp_path, text))
