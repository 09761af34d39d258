"""Constants for the search locator and history modules."""

# Hacker News search API (Algolia)
DEFAULT_API_BASE = "https://hn.algolia.com/api/v1"
API_SEARCH_PATH = "/search"

# Query parameter names
PARAM_SEARCH = "query"
PARAM_PAGE = "page"

# Term used when nothing has been remembered yet
DEFAULT_SEARCH_TERM = "React"

# Key under which the last search term is persisted
SEARCH_TERM_KEY = "search"

# Number of past search terms offered for quick re-search
HISTORY_LIMIT = 5

# Log component name
COMPONENT_SEARCH = "search"
