import pytest

from html_entry.document import parse_document
from html_entry.entity_fetcher import EntityFetcher
from html_entry.exceptions import ConfigurationError
from html_entry.schemas import SelectorInstruction
from html_entry.selector_cache import SelectorCache

ITEM_INSTRUCTIONS = [{
    "selector": ".item",
    "data": {
        "title": {"selector": "h2"},
        "votes": {"selector": ".votes"},
    },
}]

COLUMNS_HTML = """
<div id="columns">
  <p class="up"><b>u1</b></p><p class="up"><b>u2</b></p><p class="up"><b>u3</b></p>
  <p class="down"><b>d1</b></p><p class="down"><b>d2</b></p>
</div>
"""


def test_plenty_returns_one_record_per_item(items_document):
    """Plenty mode: one record per matched node."""
    fetcher = EntityFetcher(ITEM_INSTRUCTIONS)

    records = fetcher.fetch(items_document, plenty=True)

    assert records == [
        {"title": "First", "votes": "10"},
        {"title": "Second", "votes": "20"},
        {"title": "Third", "votes": "30"},
    ]


def test_independent_columns_align_by_index():
    """Records are grouped by position across instructions."""
    document = parse_document(COLUMNS_HTML)
    fetcher = EntityFetcher([
        {"selector": ".up", "data": {"up": {"selector": "b"}}},
        {"selector": ".down", "data": {"down": {"selector": "b"}}},
    ])

    records = fetcher.fetch(document, plenty=True)

    assert records == [
        {"up": "u1", "down": "d1"},
        {"up": "u2", "down": "d2"},
        {"up": "u3"},
    ]


def test_merge_collapses_matches_into_first_record(votes_document):
    """merge puts every match into record 0."""
    fetcher = EntityFetcher([
        {"selector": "ul:not(.tags) li", "data": {"title": {"selector": "h3"}}},
        {"selector": ".tag", "merge": True, "data": {"tag": {"selector": "a"}}},
    ])

    records = fetcher.fetch(votes_document, plenty=True)

    assert records == [
        {"title": "alpha", "tag": "xml"},
        {"title": "beta"},
    ]


def test_merge_alone_yields_a_single_record(votes_document):
    """A merge-only instruction set gives one record."""
    fetcher = EntityFetcher([
        {"selector": ".missing", "data": {"title": {"selector": "h3"}}},
        {"selector": ".tag", "merge": True, "data": {"tag": {"selector": "a"}}},
    ])

    assert fetcher.fetch(votes_document, plenty=True) == [{"tag": "xml"}]


def test_allow_empty_keeps_one_group(items_document):
    """allow_empty with no match still yields one record of absent values."""
    fetcher = EntityFetcher([
        {"selector": ".missing", "allow_empty": True, "data": {"title": {"selector": "h2"}}},
    ])

    assert fetcher.fetch(items_document, plenty=True) == [{"title": None}]


def test_empty_match_without_allow_empty_adds_nothing(items_document):
    """An unmatched instruction without allow_empty contributes no record."""
    fetcher = EntityFetcher([
        {"selector": ".missing", "data": {"title": {"selector": "h2"}}},
    ])

    assert fetcher.fetch(items_document, plenty=True) == []


def test_allow_empty_column_fills_first_record_only(items_document):
    """An empty allow_empty column lands on index 0 only."""
    fetcher = EntityFetcher([
        {"selector": ".item", "data": {"title": {"selector": "h2"}}},
        {"selector": ".sponsor", "allow_empty": True, "data": {"sponsor": {"selector": "a"}}},
    ])

    records = fetcher.fetch(items_document, plenty=True)

    assert records == [
        {"title": "First", "sponsor": None},
        {"title": "Second"},
        {"title": "Third"},
    ]


def test_instruction_without_data_still_emits_records(items_document):
    """Matches without data give empty records."""
    fetcher = EntityFetcher({"selector": ".item"})
    assert fetcher.fetch(items_document, plenty=True) == [{}, {}, {}]


def test_function_fields_run_in_declaration_order(votes_document):
    """Function fields see only the fields declared before them."""
    fetcher = EntityFetcher([{
        "selector": "ul:not(.tags) li",
        "data": {
            "vote_up": {"selector": ".vote-up"},
            "vote_down": {"selector": ".vote-down"},
            "vote_diff": {
                "type": "function",
                "function": lambda info, name, document, instruction:
                    int(info["vote_up"]) - int(info["vote_down"]),
            },
            "early": {
                "type": "function",
                "function": lambda info, name, document, instruction: info.get("late"),
            },
            "late": {"selector": "h3"},
        },
    }])

    records = fetcher.fetch(votes_document, plenty=True)

    assert [record["vote_diff"] for record in records] == [4, 3]
    assert [record["early"] for record in records] == [None, None]
    assert [record["late"] for record in records] == ["alpha", "beta"]
    assert list(records[0]) == ["vote_up", "vote_down", "vote_diff", "early", "late"]


def test_function_instruction_selects_entity_nodes(items_document):
    """A function instruction may pick the entity nodes itself."""
    fetcher = EntityFetcher([{
        "type": "function",
        "function": lambda document, instruction: document.select(".item")[1:],
        "data": {"title": {"selector": "h2"}},
    }])

    assert fetcher.fetch(items_document, plenty=True) == [{"title": "Second"}, {"title": "Third"}]


def test_function_instruction_returning_none_is_one_absent_node(items_document):
    """None from a function instruction is one absent node."""
    fetcher = EntityFetcher([{
        "type": "function",
        "function": lambda document, instruction: None,
        "data": {"title": {"selector": "h2"}},
    }])

    assert fetcher.fetch(items_document, plenty=True) == [{"title": None}]


def test_single_mode_shares_one_record(votes_document):
    """Single mode: first match of every instruction, one shared record."""
    fetcher = EntityFetcher([
        {"selector": "ul li", "data": {"title": {"selector": "h3"}}},
        {"selector": ".tag", "data": {"tag": {"selector": "a"}, "href": {"selector": "a", "attribute": "href"}}},
        {"selector": ".missing", "data": {"missing": {"selector": "a"}}},
        {"selector": "ul"},
    ])

    record = fetcher.fetch(votes_document)

    assert record == {"title": "alpha", "tag": "python", "href": "/t/python", "missing": None}


def test_single_mode_with_function_field(votes_document):
    """Function fields work in single mode."""
    fetcher = EntityFetcher(SelectorInstruction.model_validate({
        "selector": "ul li",
        "data": {
            "up": {"selector": ".vote-up"},
            "double": {"type": "function",
                       "function": lambda info, name, document, instruction: int(info["up"]) * 2},
        },
    }))

    assert fetcher.fetch(votes_document, plenty=False) == {"up": "5", "double": 10}


def test_cache_does_not_change_results(items_document):
    """A cache only saves work; records are identical."""
    cache = SelectorCache()
    cached = EntityFetcher(ITEM_INSTRUCTIONS, cache=cache)
    plain = EntityFetcher(ITEM_INSTRUCTIONS)

    first = cached.fetch(items_document, plenty=True)
    second = cached.fetch(items_document, plenty=True)

    assert first == second == plain.fetch(items_document, plenty=True)
    assert cache.stats()["hits"] > 0


def test_fetch_without_instructions_is_a_configuration_error(items_document):
    """Fetching with no instructions fails hard."""
    fetcher = EntityFetcher()
    with pytest.raises(ConfigurationError):
        fetcher.fetch(items_document, plenty=True)
    with pytest.raises(ConfigurationError):
        fetcher.fetch(items_document)


def test_non_list_instructions_are_rejected():
    """Strings and lists of strings are not instructions."""
    fetcher = EntityFetcher()
    with pytest.raises(ConfigurationError):
        fetcher.instructions = ".item"
    with pytest.raises(ConfigurationError):
        fetcher.instructions = [".item"]


def test_function_instruction_may_return_any_iterable(items_document):
    """Generators and filter objects are walked in order, not wrapped as one node."""
    fetcher = EntityFetcher([{
        "type": "function",
        "function": lambda document, instruction:
            filter(lambda item: item.h2.get_text() != "First", document.select(".item")),
        "data": {"title": {"selector": "h2"}},
    }])

    assert fetcher.fetch(items_document, plenty=True) == [{"title": "Second"}, {"title": "Third"}]


def test_function_instruction_returning_one_tag_is_one_node(items_document):
    """A single tag is wrapped, not iterated over its children."""
    fetcher = EntityFetcher([{
        "type": "function",
        "function": lambda document, instruction: document.select_one(".item"),
        "data": {"title": {"selector": "h2"}},
    }])

    assert fetcher.fetch(items_document, plenty=True) == [{"title": "First"}]
