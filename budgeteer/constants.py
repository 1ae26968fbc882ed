from __future__ import annotations

"""Rule tables for the local query heuristics.

Ordered keyword lists drive intent detection and routing; keeping them here
lets the classifier, the assistant and the tests share one vocabulary.
"""

# Intent rules are checked in this order; first hit wins.
SEARCH_KEYWORDS = ["find", "search", "look for"]
COMPARE_KEYWORDS = ["compare", "cheapest", "best price"]
SHOPPING_LIST_KEYWORDS = ["list", "buy", "need", "get me"]
BUDGET_KEYWORDS = ["budget", "spend", "cost", "under"]

# Brand names and unit markers that make a query "specific"
SPECIFIC_INDICATORS = [
    "samsung",
    "apple",
    "lg",
    "sony",
    "coca-cola",
    "coke",
    "pepsi",
    "tide",
    "dawn",
    "pampers",
    "huggies",
    "2l",
    "500ml",
    "oz",
    "inch",
]

# Keywords that mark a short query as a direct catalog lookup
DIRECT_SEARCH_KEYWORDS = SEARCH_KEYWORDS + COMPARE_KEYWORDS + ["price of", "how much"]

# Command phrases stripped before a query is used as a search term
COMMAND_PHRASES = [
    "find me",
    "find",
    "search for",
    "search",
    "look for",
    "compare prices for",
    "compare prices of",
    "compare",
    "cheapest",
    "best price for",
    "best price on",
    "best price",
    "price of",
    "how much is",
    "how much are",
    "get me",
    "i need",
    "buy",
]

STOPWORDS = {
    "a", "an", "the", "some", "for", "of", "to", "and", "or", "me", "my",
    "i", "want", "please", "with", "in", "on", "at",
}

# Colloquial name -> catalog name
NAME_NORMALIZATIONS = {
    "coke": "Coca-Cola",
    "tv": "Television",
    "phone": "Smartphone",
    "laptop": "Notebook Computer",
}

DEFAULT_CATEGORY_EXPANSIONS = {
    "snacks": ["chips", "cookies", "granola bars", "crackers", "pretzels"],
    "dairy": ["milk", "cheese", "yogurt", "butter", "cream"],
    "beverages": ["water", "juice", "soda", "coffee", "tea"],
    "cleaning": ["dish soap", "laundry detergent", "bleach", "wipes", "cleaner"],
    "personal care": ["shampoo", "soap", "toothpaste", "deodorant", "lotion"],
    "baby": ["diapers", "wipes", "formula", "baby food", "shampoo"],
}

NO_ITEMS_MESSAGE = "No items to analyze."
NO_RESULTS_MESSAGE = "No items found matching your criteria."
NO_DATA_MESSAGE = "No data available for your query."
UNPROCESSABLE_MESSAGE = "I'm sorry, I couldn't process that query. Please try rephrasing."
