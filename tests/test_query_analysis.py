from budgeteer.constants import DEFAULT_CATEGORY_EXPANSIONS
from budgeteer.pipeline_types import Intent
from budgeteer.query_analysis import (
    dedupe_terms,
    detect_intent,
    expand_category,
    extract_search_term,
    is_generic,
    is_simple,
    is_specific,
    local_search_terms,
    normalize_product_name,
)


def test_detect_intent_rule_order():
    assert detect_intent("Find me some milk") == Intent.SEARCH
    assert detect_intent("cheapest eggs around") == Intent.COMPARE
    assert detect_intent("I need stuff for a cake") == Intent.SHOPPING_LIST
    assert detect_intent("what can I spend on dinner") == Intent.BUDGET
    assert detect_intent("hello there") == Intent.GENERIC
    # SEARCH is checked before COMPARE
    assert detect_intent("find the cheapest milk") == Intent.SEARCH


def test_is_specific_brands_and_units():
    assert is_specific("Coca-Cola 2L")
    assert is_specific("65 inch samsung")
    assert not is_specific("milk and bread")
    assert is_generic("milk and bread")


def test_is_simple_routes_short_direct_queries():
    assert is_simple("find milk")
    assert is_simple("how much is bread")
    assert is_simple("pepsi 2l")
    assert not is_simple("what do I need to bake a chocolate cake for ten people")
    # long direct-search phrasing is not simple
    assert not is_simple("find everything I need for a birthday party")


def test_expand_category():
    assert expand_category("Dairy", DEFAULT_CATEGORY_EXPANSIONS)[0] == "milk"
    assert expand_category("gadgets", DEFAULT_CATEGORY_EXPANSIONS) == ["gadgets"]


def test_normalize_product_name_whole_words_only():
    assert normalize_product_name("coke 2l") == "Coca-Cola 2l"
    assert normalize_product_name("smart tv") == "smart Television"
    # "tv" inside another word is left alone
    assert normalize_product_name("tvshow") == "tvshow"


def test_extract_search_term_strips_commands():
    assert extract_search_term("Find me some milk") == "milk"
    assert extract_search_term("How much is the butter?") == "butter"
    assert extract_search_term("compare prices for 2% milk") == "2% milk"
    assert extract_search_term("eggs") == "eggs"
    assert extract_search_term("   ") == ""


def test_local_search_terms():
    assert local_search_terms("stock up on snacks", DEFAULT_CATEGORY_EXPANSIONS) == [
        "chips", "cookies", "granola bars", "crackers", "pretzels",
    ]
    assert local_search_terms("find coke", DEFAULT_CATEGORY_EXPANSIONS) == ["Coca-Cola"]
    assert local_search_terms("find bread", DEFAULT_CATEGORY_EXPANSIONS) == ["bread"]
    assert local_search_terms("", DEFAULT_CATEGORY_EXPANSIONS) == []


def test_dedupe_terms():
    assert dedupe_terms(["Flour", "flour", " sugar ", ""]) == ["flour", "sugar"]
