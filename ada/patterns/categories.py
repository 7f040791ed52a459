"""
Category definitions - single source of truth for category metadata
Used by the heuristic classifier, CLI rendering and library filters

Declaration order matters: the keyword scorer breaks ties in favour of the
category declared first.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from ada.models.item import Category


@dataclass(frozen=True)
class CategoryDefinition:
    id: Category
    label: str
    icon: str
    color: str
    keywords: Tuple[str, ...]


_DEFINITIONS = (
    CategoryDefinition(
        id=Category.EVENTS_PLANS,
        label="Events & Plans",
        icon="calendar",
        color="#8B5CF6",
        keywords=(
            "event", "concert", "meetup", "party", "rsvp",
            "tickets", "festival", "conference", "wedding", "birthday",
        ),
    ),
    CategoryDefinition(
        id=Category.FOOD_DINING,
        label="Food & Dining",
        icon="restaurant",
        color="#F59E0B",
        keywords=(
            "restaurant", "recipe", "food", "dining", "menu",
            "reservation", "cooking", "brunch", "dinner", "cafe",
        ),
    ),
    CategoryDefinition(
        id=Category.SHOPPING_DEALS,
        label="Shopping & Deals",
        icon="cart",
        color="#10B981",
        keywords=(
            "buy", "sale", "discount", "coupon", "deal",
            "price", "amazon", "shop", "order", "product", "wishlist",
        ),
    ),
    CategoryDefinition(
        id=Category.TRAVEL,
        label="Travel",
        icon="airplane",
        color="#3B82F6",
        keywords=(
            "flight", "hotel", "airbnb", "travel", "trip",
            "booking", "destination", "itinerary", "vacation", "airport",
        ),
    ),
    CategoryDefinition(
        id=Category.JOBS_CAREER,
        label="Jobs & Career",
        icon="briefcase",
        color="#6366F1",
        keywords=(
            "job", "career", "hiring", "apply", "resume",
            "linkedin", "intern", "salary", "interview", "recruiter",
        ),
    ),
    CategoryDefinition(
        id=Category.LEARNING,
        label="Learning",
        icon="school",
        color="#14B8A6",
        keywords=(
            "tutorial", "course", "learn", "article", "paper",
            "study", "documentation", "guide", "how-to", "arxiv",
        ),
    ),
    CategoryDefinition(
        id=Category.ENTERTAINMENT,
        label="Entertainment",
        icon="film",
        color="#EC4899",
        keywords=(
            "movie", "show", "netflix", "spotify", "music",
            "game", "book", "podcast", "youtube", "watch",
        ),
    ),
    CategoryDefinition(
        id=Category.HEALTH_FITNESS,
        label="Health & Fitness",
        icon="fitness",
        color="#EF4444",
        keywords=(
            "workout", "gym", "health", "fitness", "exercise",
            "diet", "yoga", "doctor", "appointment", "wellness",
        ),
    ),
    CategoryDefinition(
        id=Category.FINANCE,
        label="Finance",
        icon="wallet",
        color="#059669",
        keywords=(
            "bill", "payment", "invest", "stock", "budget",
            "bank", "receipt", "tax", "insurance", "crypto",
        ),
    ),
    CategoryDefinition(
        id=Category.SOCIAL,
        label="Social",
        icon="people",
        color="#F97316",
        keywords=(
            "contact", "profile", "friend", "message",
            "instagram", "twitter", "social", "dm",
        ),
    ),
    CategoryDefinition(
        id=Category.INSPIRATION,
        label="Inspiration",
        icon="sparkles",
        color="#A855F7",
        keywords=(
            "quote", "idea", "design", "inspiration",
            "mood", "aesthetic", "creative", "art", "pinterest",
        ),
    ),
    CategoryDefinition(
        id=Category.OTHER,
        label="Other",
        icon="folder",
        color="#6B7280",
        keywords=(),
    ),
)

# dicts keep insertion order, so iteration follows declaration order
CATEGORIES: Dict[Category, CategoryDefinition] = {definition.id: definition for definition in _DEFINITIONS}

CATEGORY_LIST: Tuple[CategoryDefinition, ...] = _DEFINITIONS


def get_category_def(category: Optional[Union[Category, str]]) -> CategoryDefinition:
    """Look up a category definition, falling back to "other" for unknown ids"""
    if category:
        try:
            return CATEGORIES[Category(category)]
        except ValueError:
            pass
    return CATEGORIES[Category.OTHER]
