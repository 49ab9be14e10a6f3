"""Product catalog service interface and implementations."""

from dataclasses import dataclass, field
from typing import Literal, Protocol

IssueType = Literal["missing_description", "uncategorized", "low_stock", "missing_images", "structure_issues"]

LOW_STOCK_THRESHOLD = 3


@dataclass
class Variant:
    """Purchasable variant of a product."""

    sku: str | None
    stock: int = 0
    size: str | None = None
    color: str | None = None


@dataclass
class Product:
    """Catalog product."""

    id: str
    name: str
    brand: str
    price: float
    category: str | None = None
    descriptions: dict[str, str] = field(default_factory=dict)  # locale -> text
    images: list[str] = field(default_factory=list)
    variants: list[Variant] = field(default_factory=list)

    @property
    def total_stock(self) -> int:
        return sum(variant.stock for variant in self.variants)

    def description(self, locale: str) -> str:
        return self.descriptions.get(locale, "")


@dataclass
class Page:
    """One page of a listing."""

    items: list[Product]
    page: int
    page_size: int
    total: int

    @property
    def page_count(self) -> int:
        return max(1, -(-self.total // self.page_size))


class CatalogService(Protocol):
    """Interface for product catalog access."""

    async def list_categories(self) -> list[str]:
        """Get the categories products may be assigned to."""
        ...

    async def get_products(self, page: int, page_size: int, only_uncategorized: bool = False) -> Page:
        """Get one page of products.

        Args:
            page: 1-based page number
            page_size: Products per page
            only_uncategorized: Restrict to products without a category

        Returns:
            The requested page
        """
        ...

    async def search_products(self, query: str, locale: str, limit: int, page: int) -> Page:
        """Full-text search over name, brand and description."""
        ...

    async def get_product(self, product_id: str) -> Product | None:
        """Get a product by ID."""
        ...

    async def get_audit_products(self, issue_type: IssueType, locale: str) -> list[Product]:
        """Get products affected by a catalog issue."""
        ...


def _paginate(products: list[Product], page: int, page_size: int) -> Page:
    page = max(1, page)
    start = (page - 1) * page_size
    return Page(items=products[start : start + page_size], page=page, page_size=page_size, total=len(products))


class InMemoryCatalogService:
    """In-memory catalog service

    Uses mock product data stored in memory.
    """

    CATEGORIES = ["Kites", "Boards", "Harnesses", "Wetsuits", "Accessories"]

    def __init__(self, products: list[Product] | None = None):
        """Initialize with mock product data unless products are given."""
        self.products = products if products is not None else self._create_mock_products()

    async def list_categories(self) -> list[str]:
        return list(self.CATEGORIES)

    async def get_products(self, page: int, page_size: int, only_uncategorized: bool = False) -> Page:
        products = [p for p in self.products if not only_uncategorized or not p.category]
        return _paginate(products, page, page_size)

    async def search_products(self, query: str, locale: str, limit: int, page: int) -> Page:
        needle = query.lower().strip()
        matches = [
            p
            for p in self.products
            if needle in p.name.lower() or needle in p.brand.lower() or needle in p.description(locale).lower()
        ]
        return _paginate(matches, page, limit)

    async def get_product(self, product_id: str) -> Product | None:
        return next((p for p in self.products if p.id == product_id), None)

    async def get_audit_products(self, issue_type: IssueType, locale: str) -> list[Product]:
        if issue_type == "missing_description":
            return [p for p in self.products if not p.description(locale).strip()]
        if issue_type == "uncategorized":
            return [p for p in self.products if not p.category]
        if issue_type == "low_stock":
            return [p for p in self.products if p.total_stock < LOW_STOCK_THRESHOLD]
        if issue_type == "missing_images":
            return [p for p in self.products if not p.images]
        return [p for p in self.products if not p.variants or any(not v.sku for v in p.variants)]

    def _create_mock_products(self) -> list[Product]:
        """Create mock product data for development."""
        return [
            Product(
                id="PRD_001",
                name="Rebel Kite 12m",
                brand="Duotone",
                price=1899.0,
                category="Kites",
                descriptions={
                    "es": "Cometa de alto rendimiento para big air.",
                    "en": "High performance big air kite.",
                    "it": "Aquilone ad alte prestazioni per big air.",
                },
                images=["rebel-12.jpg"],
                variants=[Variant(sku="DT-REB-12-BLU", stock=4, size="12m", color="Blue")],
            ),
            Product(
                id="PRD_002",
                name="Jaime Twintip 138",
                brand="Duotone",
                price=749.0,
                category="Boards",
                descriptions={"es": "Tabla twintip versátil.", "en": "Versatile twintip board."},
                images=["jaime-138.jpg"],
                variants=[Variant(sku="DT-JAI-138", stock=1, size="138")],
            ),
            Product(
                id="PRD_003",
                name="Apex Harness",
                brand="ION",
                price=329.0,
                category=None,
                descriptions={},
                images=[],
                variants=[Variant(sku=None, stock=6, size="M"), Variant(sku="ION-APX-L", stock=2, size="L")],
            ),
            Product(
                id="PRD_004",
                name="Seek Core 4/3",
                brand="ION",
                price=289.0,
                category="Wetsuits",
                descriptions={"es": "Neopreno 4/3 para agua fría.", "en": "4/3 wetsuit for cold water."},
                images=["seek-43.jpg"],
                variants=[],
            ),
            Product(
                id="PRD_005",
                name="Kite Pump",
                brand="Duotone",
                price=59.0,
                category="Accessories",
                descriptions={"es": "", "en": "Single action kite pump."},
                images=["pump.jpg"],
                variants=[Variant(sku="DT-PUMP", stock=20)],
            ),
        ]


catalog_service = InMemoryCatalogService()
