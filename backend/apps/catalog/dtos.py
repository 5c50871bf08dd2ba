from dataclasses import dataclass


@dataclass
class ProductDTO:
    id: int
    name: str
    description: str
    price: str
    category: str
