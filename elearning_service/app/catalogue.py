"""Static catalogue data: purchasable packages and the default course list."""
from __future__ import annotations

from dataclasses import dataclass

CURRENCY = "INR"


@dataclass(frozen=True)
class Package:
	id: int
	name: str
	price_inr: int

	@property
	def amount_paise(self) -> int:
		return self.price_inr * 100


PACKAGES: dict[int, Package] = {
	package.id: package
	for package in (
		Package(1, "STARTER PACKAGE", 500),
		Package(2, "BASIC PACKAGE", 1499),
		Package(3, "SILVER PACKAGE", 2999),
		Package(4, "GOLD PACKAGE", 5499),
		Package(5, "DIAMOND PACKAGE", 9999),
		Package(6, "PREMIUM PACKAGE", 14999),
	)
}


def get_package(package_id: int) -> Package | None:
	return PACKAGES.get(package_id)


def _unsplash(photo: str) -> str:
	return f"https://images.unsplash.com/{photo}?w=400&auto=format&fit=crop&q=80"


DEFAULT_COURSES: tuple[dict[str, str], ...] = (
	{"name": "AFFILIATE MARKETING", "tag": "Marketing", "thumbnail_url": _unsplash("photo-1563986768609-322da13575f3")},
	{"name": "INSTAGRAM MARKETING", "tag": "Social Media", "thumbnail_url": _unsplash("photo-1611162617474-5b21e879e113")},
	{"name": "GRAPHIC DESIGNING", "tag": "Design", "thumbnail_url": _unsplash("photo-1561070791-2526d30994b5")},
	{"name": "VIDEO EDITING", "tag": "Creative", "thumbnail_url": _unsplash("photo-1574717024653-61fd2cf4d44d")},
	{"name": "FACEBOOK ADS", "tag": "Advertising", "thumbnail_url": _unsplash("photo-1460925895917-afdab827c52f")},
	{"name": "GOOGLE ADS", "tag": "Advertising", "thumbnail_url": _unsplash("photo-1573804633927-bfcbcd909acd")},
	{"name": "YOUTUBE MASTERY", "tag": "Content", "thumbnail_url": _unsplash("photo-1611162616305-c69b3fa7fbe0")},
	{"name": "CONTENT CREATION", "tag": "Creative", "thumbnail_url": _unsplash("photo-1504711434969-e33886168f5c")},
	{"name": "SOCIAL MEDIA MANAGEMENT", "tag": "Social Media", "thumbnail_url": _unsplash("photo-1542744173-8e7e53415bb0")},
	{"name": "DROP SHIPPING", "tag": "eCommerce", "thumbnail_url": _unsplash("photo-1563013544-824ae1b704d3")},
	{"name": "FREELANCING", "tag": "Career", "thumbnail_url": _unsplash("photo-1498049794561-7780e7231661")},
	{"name": "WHATSAPP MARKETING", "tag": "Marketing", "thumbnail_url": _unsplash("photo-1611944212129-29977ae1398c")},
)
