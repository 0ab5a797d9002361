"""
Kavin's Catalog Backend — Variant Editor Tests
================================================

What we test:
    ✅ Size presets toggle (add missing / remove when complete)
    ✅ Manual sizes: upper-cased, blanks and duplicates ignored
    ✅ Colors need a name and a hex value
    ✅ Cover photo reordering and removal
    ✅ The last variation cannot be removed
    ✅ apply_edit dispatch and form normalization
"""

import pytest

from app.exceptions import ValidationError
from app.schemas.product import (
    ColorVariant,
    FormEditAction,
    FormEditRequest,
    ProductForm,
    ProductFormGeneral,
    ProductVariation,
)
from app.services.variant_editor import (
    add_color,
    add_size,
    apply_edit,
    move_image_to_front,
    normalize_form,
    remove_color,
    remove_image,
    remove_variation,
    toggle_size_group,
)


class TestSizes:

    def test_toggle_adds_missing_sizes_in_preset_order(self):
        assert toggle_size_group(["M", "XG"], "STANDARD") == ["M", "XG", "P", "G", "GG"]

    def test_toggle_removes_complete_preset(self):
        assert toggle_size_group(["P", "M", "G", "GG", "G1"], "STANDARD") == ["G1"]

    def test_toggle_plus_preset_case_insensitive(self):
        assert toggle_size_group([], "plus") == ["G1", "G2", "G3"]

    def test_toggle_unknown_group(self):
        with pytest.raises(ValidationError):
            toggle_size_group([], "KIDS")

    def test_add_size_normalizes(self):
        assert add_size(["P"], " m ") == ["P", "M"]

    def test_add_size_ignores_blank_and_duplicates(self):
        assert add_size(["P"], "   ") == ["P"]
        assert add_size(["P"], "p") == ["P"]

    def test_does_not_mutate_input(self):
        sizes = ["P"]
        add_size(sizes, "M")
        toggle_size_group(sizes, "PLUS")
        assert sizes == ["P"]


class TestColorsAndImages:

    def test_add_color(self):
        colors = add_color([], " #2C3E50 ", " Azul Marinho ")
        assert colors == [ColorVariant(hex="#2C3E50", name="Azul Marinho")]

    @pytest.mark.parametrize("hex_value,name", [("#000000", ""), ("", "Preto"), ("  ", "  ")])
    def test_add_color_requires_both_fields(self, hex_value, name):
        with pytest.raises(ValidationError):
            add_color([], hex_value, name)

    def test_remove_color_out_of_range(self):
        with pytest.raises(ValidationError):
            remove_color([ColorVariant(hex="#000", name="Preto")], 3)

    def test_move_image_to_front(self):
        assert move_image_to_front(["a", "b", "c"], 2) == ["c", "a", "b"]

    def test_remove_image(self):
        assert remove_image(["a", "b", "c"], 1) == ["a", "c"]


class TestVariations:

    def test_last_variation_cannot_be_removed(self):
        with pytest.raises(ValidationError) as exc_info:
            remove_variation([ProductVariation(reference="A")], 0)
        assert exc_info.value.message == "A product needs at least one variation."

    def test_remove_variation(self):
        variations = [ProductVariation(reference="A"), ProductVariation(reference="B")]
        assert [v.reference for v in remove_variation(variations, 0)] == ["B"]


class TestApplyEdit:

    def _form(self) -> ProductForm:
        return ProductForm(
            general=ProductFormGeneral(name="Vestido", images=["a.jpg", "b.jpg"]),
            variations=[
                ProductVariation(reference="REF-1", sizes=["P"]),
                ProductVariation(reference="REF-1-PLUS"),
            ],
        )

    def test_toggle_size_group_on_second_variation(self):
        form = apply_edit(
            FormEditRequest(
                form=self._form(),
                action=FormEditAction.TOGGLE_SIZE_GROUP,
                variation_index=1,
                size_group="PLUS",
            )
        )
        assert form.variations[1].sizes == ["G1", "G2", "G3"]
        assert form.variations[0].sizes == ["P"]

    def test_add_variation(self):
        form = apply_edit(FormEditRequest(form=self._form(), action=FormEditAction.ADD_VARIATION))
        assert len(form.variations) == 3
        assert form.variations[2].reference == ""

    def test_move_image_needs_index(self):
        with pytest.raises(ValidationError):
            apply_edit(FormEditRequest(form=self._form(), action=FormEditAction.MOVE_IMAGE_TO_FRONT))

    def test_move_image_to_front(self):
        form = apply_edit(
            FormEditRequest(form=self._form(), action=FormEditAction.MOVE_IMAGE_TO_FRONT, index=1)
        )
        assert form.general.images == ["b.jpg", "a.jpg"]

    def test_add_color_without_color(self):
        with pytest.raises(ValidationError):
            apply_edit(FormEditRequest(form=self._form(), action=FormEditAction.ADD_COLOR))

    def test_variation_index_out_of_range(self):
        with pytest.raises(ValidationError):
            apply_edit(
                FormEditRequest(
                    form=self._form(), action=FormEditAction.ADD_SIZE, variation_index=5, size="M"
                )
            )


class TestNormalizeForm:

    def test_cleans_sizes_and_colors(self):
        form = ProductForm(
            variations=[
                ProductVariation(
                    reference=" REF-1 ",
                    sizes=["p", "P", " ", "m"],
                    colors=[ColorVariant(hex="#000", name="Preto"), ColorVariant(hex="", name="")],
                )
            ]
        )

        variation = normalize_form(form).variations[0]

        assert variation.reference == "REF-1"
        assert variation.sizes == ["P", "M"]
        assert [c.name for c in variation.colors] == ["Preto"]
