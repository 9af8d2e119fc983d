"""
Editable state for composing a product before it is submitted.

`ImageSet` keeps an ordered list of gallery image references whose
display_order is always 0..n-1. `ProductDraft` is the three-step
create-product wizard (category -> subcategory -> details) as an explicit
state object.

The server also uses `ImageSet.from_refs` to normalise image lists that
arrive on product updates.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from app.schemas.product import ProductCreate, ProductImageRef


@dataclass
class ImageRef:
    image_id: int
    display_order: int


class ImageSet:
    """
    Ordered, duplicate-free list of gallery images for one product.

    Every mutation re-indexes display_order to a contiguous 0..n-1 run.
    """

    def __init__(self, image_ids: Iterable[int] = ()):
        self._ids: list[int] = []
        self.add(*image_ids)

    @classmethod
    def from_ids(cls, image_ids: Iterable[int]) -> "ImageSet":
        return cls(image_ids)

    @classmethod
    def from_refs(cls, refs: Iterable[ProductImageRef]) -> "ImageSet":
        """
        Build from (image_id, display_order?) pairs.

        Entries are sorted by their supplied display_order (missing orders
        keep their list position after the ordered ones); ties keep input
        order. The result is re-indexed from 0.
        """
        indexed = list(enumerate(refs))
        indexed.sort(
            key=lambda pair: (
                pair[1].display_order is None,
                pair[1].display_order if pair[1].display_order is not None else 0,
                pair[0],
            )
        )
        return cls(ref.image_id for _, ref in indexed)

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self):
        return iter(self.entries())

    def add(self, *image_ids: int) -> None:
        """Append images at the next display orders; already present ids are ignored."""
        for image_id in image_ids:
            if image_id not in self._ids:
                self._ids.append(image_id)

    def remove(self, index: int) -> ImageRef:
        """Drop the entry at `index` and close the gap."""
        self._check_index(index)
        image_id = self._ids.pop(index)
        return ImageRef(image_id=image_id, display_order=index)

    def remove_image(self, image_id: int) -> None:
        try:
            self._ids.remove(image_id)
        except ValueError:
            raise KeyError(image_id) from None

    def move(self, source: int, destination: int) -> None:
        """Move the entry at `source` so it ends up at `destination`."""
        self._check_index(source)
        self._check_index(destination)
        image_id = self._ids.pop(source)
        self._ids.insert(destination, image_id)

    def clear(self) -> None:
        self._ids.clear()

    def ids(self) -> list[int]:
        return list(self._ids)

    def entries(self) -> list[ImageRef]:
        return [ImageRef(image_id=i, display_order=n) for n, i in enumerate(self._ids)]

    def as_payload(self) -> list[ProductImageRef]:
        return [
            ProductImageRef(image_id=ref.image_id, display_order=ref.display_order)
            for ref in self.entries()
        ]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._ids):
            raise IndexError(f"image index {index} out of range")


class WizardStep(int, Enum):
    CATEGORY = 1
    SUBCATEGORY = 2
    DETAILS = 3


class DraftError(ValueError):
    """Raised for an action that is not allowed in the current step."""


@dataclass
class DetailRow:
    key: str = ""
    value: str = ""


@dataclass
class ProductDraft:
    """
    State of the create-product wizard.

    Going back from SUBCATEGORY forgets the chosen category; going back
    from DETAILS forgets the chosen subcategory. Navigating away simply
    drops the object.
    """

    step: WizardStep = WizardStep.CATEGORY
    category_id: int | None = None
    subcategory_id: int | None = None
    name: str = ""
    description: str = ""
    min_order: str | None = None
    delivery_info: str | None = None
    whatsapp_number: str = ""
    thumbnail_id: int | None = None
    detail_rows: list[DetailRow] = field(default_factory=lambda: [DetailRow()])
    images: ImageSet = field(default_factory=ImageSet)

    # ----- Navigation -----

    def choose_category(self, category_id: int) -> None:
        if self.step is not WizardStep.CATEGORY:
            raise DraftError("category can only be chosen on the first step")
        self.category_id = category_id
        self.step = WizardStep.SUBCATEGORY

    def choose_subcategory(self, subcategory_id: int) -> None:
        if self.step is not WizardStep.SUBCATEGORY:
            raise DraftError("subcategory can only be chosen on the second step")
        self.subcategory_id = subcategory_id
        self.step = WizardStep.DETAILS

    def back(self) -> None:
        if self.step is WizardStep.SUBCATEGORY:
            self.category_id = None
            self.step = WizardStep.CATEGORY
        elif self.step is WizardStep.DETAILS:
            self.subcategory_id = None
            self.step = WizardStep.SUBCATEGORY

    # ----- Detail rows -----

    def add_detail(self) -> None:
        self.detail_rows.append(DetailRow())

    def set_detail(self, index: int, key: str | None = None, value: str | None = None) -> None:
        row = self.detail_rows[index]
        if key is not None:
            row.key = key
        if value is not None:
            row.value = value

    def remove_detail(self, index: int) -> None:
        del self.detail_rows[index]

    def details(self) -> dict[str, str]:
        """Completed rows in entry order; a repeated key keeps its last value."""
        return {
            row.key.strip(): row.value.strip()
            for row in self.detail_rows
            if row.key.strip() and row.value.strip()
        }

    # ----- Images -----

    def select_thumbnail(self, image_id: int | None) -> None:
        self.thumbnail_id = image_id

    # ----- Submission -----

    def missing_fields(self) -> list[str]:
        missing = []
        if not self.name.strip():
            missing.append("name")
        if not self.description.strip():
            missing.append("description")
        if not self.whatsapp_number.strip():
            missing.append("whatsapp_number")
        if self.subcategory_id is None:
            missing.append("subcategory_id")
        return missing

    def to_create_payload(self) -> ProductCreate:
        """
        Build the POST /products body.

        Raises:
            DraftError: if the wizard is not on the last step or required
                fields are empty.
        """
        if self.step is not WizardStep.DETAILS:
            raise DraftError("finish choosing a category and subcategory first")
        missing = self.missing_fields()
        if missing:
            raise DraftError(f"Please fill in all required fields: {', '.join(missing)}")

        return ProductCreate(
            name=self.name,
            description=self.description,
            details=self.details() or None,
            min_order=self.min_order,
            delivery_info=self.delivery_info,
            whatsapp_number=self.whatsapp_number,
            thumbnail_id=self.thumbnail_id,
            subcategory_id=self.subcategory_id,
            images=self.images.as_payload(),
        )
