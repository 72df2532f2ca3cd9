"""Resort search Pydantic schemas."""
import enum
from pydantic import BaseModel, Field
from typing import List, Optional


class SortKey(str, enum.Enum):
    """Ordering applied to search results."""
    RATING_DESC = "rating_desc"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    POPULARITY = "popularity"


class SearchCriteria(BaseModel):
    """
    Visitor-supplied search criteria.
    
    min_price > max_price is accepted and simply matches nothing.
    """
    term: str = Field(default="", description="Substring matched against name or location")
    min_price: float = Field(default=0, ge=0, description="Lowest nightly price")
    max_price: Optional[float] = Field(default=None, ge=0, description="Highest nightly price, unbounded when omitted")
    min_guests: int = Field(default=1, ge=1, description="Guests the resort must accommodate")
    amenities: List[str] = Field(default_factory=list, description="Amenities that must all be present")
    sort: SortKey = Field(default=SortKey.RATING_DESC, description="Sort key")
