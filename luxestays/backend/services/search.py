"""Resort search, filter and sort service."""
from typing import Any, Iterable, List
from luxestays.backend.schemas.search import SearchCriteria, SortKey


class ResortSearchService:
    """
    Pure search pipeline over resort records.
    
    Works on anything exposing the resort attributes (ORM rows or Pydantic
    schemas). Stages run in a fixed order: text, price, capacity, amenities,
    then a stable sort. Never raises for odd criteria; an empty price range
    simply yields no results.
    """
    
    def search(self, resorts: Iterable[Any], criteria: SearchCriteria) -> List[Any]:
        """
        Filter and order resorts.
        
        Args:
            resorts: All resort records
            criteria: Search criteria
        
        Returns:
            New list of matching resorts in display order
        """
        results = list(resorts)
        results = self.filter_by_term(results, criteria.term)
        results = self.filter_by_price(results, criteria.min_price, criteria.max_price)
        results = self.filter_by_capacity(results, criteria.min_guests)
        results = self.filter_by_amenities(results, criteria.amenities)
        return self.sort(results, criteria.sort)
    
    def filter_by_term(self, resorts: List[Any], term: str) -> List[Any]:
        """Keep resorts whose name or location contains the term, ignoring case."""
        needle = (term or "").strip().lower()
        if not needle:
            return resorts
        return [
            r for r in resorts
            if needle in (r.name or "").lower() or needle in (r.location or "").lower()
        ]
    
    def filter_by_price(self, resorts: List[Any], min_price: float, max_price: float = None) -> List[Any]:
        """Keep resorts priced within [min_price, max_price]; missing prices count as 0."""
        low = min_price or 0
        return [
            r for r in resorts
            if low <= self._price(r) and (max_price is None or self._price(r) <= max_price)
        ]
    
    def filter_by_capacity(self, resorts: List[Any], min_guests: int) -> List[Any]:
        """Keep resorts that can host at least min_guests."""
        if not min_guests or min_guests <= 0:
            return resorts
        return [r for r in resorts if self.effective_capacity(r) >= min_guests]
    
    def filter_by_amenities(self, resorts: List[Any], required: List[str]) -> List[Any]:
        """Keep resorts offering every required amenity (case-insensitive)."""
        wanted = {a.strip().lower() for a in (required or []) if a and a.strip()}
        if not wanted:
            return resorts
        return [
            r for r in resorts
            if wanted.issubset({a.lower() for a in (r.amenities or [])})
        ]
    
    def sort(self, resorts: List[Any], sort_key: SortKey) -> List[Any]:
        """Stable sort by the chosen key."""
        sort_key = SortKey(sort_key)
        if sort_key == SortKey.PRICE_ASC:
            return sorted(resorts, key=self._price)
        if sort_key == SortKey.PRICE_DESC:
            return sorted(resorts, key=self._price, reverse=True)
        # There is no popularity signal yet, so popularity orders by rating.
        return sorted(resorts, key=self._rating, reverse=True)
    
    def effective_capacity(self, resort: Any) -> int:
        """
        Largest stay option capacity, else the resort's declared capacity, else 1.
        
        Args:
            resort: Resort record
        
        Returns:
            Maximum number of guests the resort can host in one stay option
        """
        stay_options = getattr(resort, "stay_options", None) or []
        largest = max((so.capacity or 0 for so in stay_options), default=0)
        return largest or getattr(resort, "capacity", None) or 1
    
    @staticmethod
    def _price(resort: Any) -> float:
        return resort.price_per_night or 0
    
    @staticmethod
    def _rating(resort: Any) -> float:
        return resort.rating or 0
