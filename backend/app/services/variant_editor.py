"""
Kavin's Catalog Backend — Variant Editor Helpers
==================================================

What:  Pure operations on the admin product form state: size presets,
       sizes and colors of a variation, image ordering and the variation list.
How:   Every helper returns a new list and never mutates its input, so the
       routes can apply them to a submitted form and echo the result back.
"""

from typing import List

from app.exceptions import ValidationError
from app.schemas.product import (
    ColorVariant,
    FormEditAction,
    FormEditRequest,
    ProductForm,
    ProductVariation,
)

SIZE_GROUPS = {
    "STANDARD": ["P", "M", "G", "GG"],
    "PLUS": ["G1", "G2", "G3"],
}


def toggle_size_group(sizes: List[str], group: str) -> List[str]:
    """
    Toggle a size preset on a variation.

    When every size of the preset is already present they are all removed;
    otherwise the missing ones are appended in preset order.
    """
    try:
        preset = SIZE_GROUPS[group.upper()]
    except KeyError:
        raise ValidationError(
            message=f"Unknown size group '{group}'. Use one of: {', '.join(SIZE_GROUPS)}",
            field="group",
        )

    if all(size in sizes for size in preset):
        return [size for size in sizes if size not in preset]
    return list(sizes) + [size for size in preset if size not in sizes]


def add_size(sizes: List[str], size: str) -> List[str]:
    size = size.strip().upper()
    if not size or size in sizes:
        return list(sizes)
    return list(sizes) + [size]


def remove_size(sizes: List[str], size: str) -> List[str]:
    return [s for s in sizes if s != size]


def add_color(colors: List[ColorVariant], hex_value: str, name: str) -> List[ColorVariant]:
    name = name.strip()
    hex_value = hex_value.strip()
    if not name or not hex_value:
        raise ValidationError(message="A color needs a name and a hex value.", field="colors")
    return list(colors) + [ColorVariant(hex=hex_value, name=name)]


def remove_color(colors: List[ColorVariant], index: int) -> List[ColorVariant]:
    _check_index(colors, index, "colors")
    return [c for i, c in enumerate(colors) if i != index]


def move_image_to_front(images: List[str], index: int) -> List[str]:
    """Makes images[index] the cover photo; the rest keep their order."""
    _check_index(images, index, "images")
    return [images[index]] + [img for i, img in enumerate(images) if i != index]


def remove_image(images: List[str], index: int) -> List[str]:
    _check_index(images, index, "images")
    return [img for i, img in enumerate(images) if i != index]


def add_variation(variations: List[ProductVariation]) -> List[ProductVariation]:
    return list(variations) + [ProductVariation()]


def remove_variation(variations: List[ProductVariation], index: int) -> List[ProductVariation]:
    if len(variations) <= 1:
        raise ValidationError(
            message="A product needs at least one variation.",
            field="variations",
        )
    _check_index(variations, index, "variations")
    return [v for i, v in enumerate(variations) if i != index]


def normalize_form(form: ProductForm) -> ProductForm:
    """
    Tidy a submitted form before it is validated and saved:
    sizes upper-cased without blanks or duplicates, blank colors dropped.
    """
    variations = []
    for variation in form.variations:
        sizes: List[str] = []
        for size in variation.sizes:
            sizes = add_size(sizes, size)
        colors = [c for c in variation.colors if c.name.strip() and c.hex.strip()]
        variations.append(variation.model_copy(update={"sizes": sizes, "colors": colors}))
    return form.model_copy(update={"variations": variations})


def _check_index(items: list, index: int, field: str) -> None:
    if not 0 <= index < len(items):
        raise ValidationError(
            message=f"Index {index} is out of range for {field}.",
            field=field,
            context={"size": len(items)},
        )


def apply_edit(request: FormEditRequest) -> ProductForm:
    """Apply one editor action to the submitted form and return the new form."""
    form = request.form
    action = request.action

    if action == FormEditAction.ADD_VARIATION:
        return form.model_copy(update={"variations": add_variation(form.variations)})
    if action == FormEditAction.REMOVE_VARIATION:
        index = _require_index(request)
        return form.model_copy(update={"variations": remove_variation(form.variations, index)})
    if action == FormEditAction.MOVE_IMAGE_TO_FRONT:
        images = move_image_to_front(form.general.images, _require_index(request))
        return form.model_copy(update={"general": form.general.model_copy(update={"images": images})})
    if action == FormEditAction.REMOVE_IMAGE:
        images = remove_image(form.general.images, _require_index(request))
        return form.model_copy(update={"general": form.general.model_copy(update={"images": images})})

    _check_index(form.variations, request.variation_index, "variations")
    variation = form.variations[request.variation_index]

    if action == FormEditAction.TOGGLE_SIZE_GROUP:
        variation = variation.model_copy(
            update={"sizes": toggle_size_group(variation.sizes, request.size_group or "")}
        )
    elif action == FormEditAction.ADD_SIZE:
        variation = variation.model_copy(update={"sizes": add_size(variation.sizes, request.size)})
    elif action == FormEditAction.REMOVE_SIZE:
        variation = variation.model_copy(update={"sizes": remove_size(variation.sizes, request.size)})
    elif action == FormEditAction.ADD_COLOR:
        if request.color is None:
            raise ValidationError(message="A color needs a name and a hex value.", field="colors")
        colors = add_color(variation.colors, request.color.hex, request.color.name)
        variation = variation.model_copy(update={"colors": colors})
    elif action == FormEditAction.REMOVE_COLOR:
        colors = remove_color(variation.colors, _require_index(request))
        variation = variation.model_copy(update={"colors": colors})

    variations = list(form.variations)
    variations[request.variation_index] = variation
    return form.model_copy(update={"variations": variations})


def _require_index(request: FormEditRequest) -> int:
    if request.index is None:
        raise ValidationError(
            message=f"'{request.action.value}' needs an index.",
            field="index",
        )
    return request.index
