from formula_engine.fill import fill_horizontal, fill_vertical, shift_formula


class TestFillHorizontal:
    def test_shift(self):
        assert fill_horizontal("=A1+B1", 0, 0, 2) == "=C1+D1"

    def test_absolute_reference_preserved(self):
        assert fill_horizontal("=$A$1+B1", 0, 0, 2) == "=$A$1+D1"

    def test_mixed_references(self):
        # Column-absolute stays, row-absolute still moves horizontally
        assert fill_horizontal("=$A1+A$1", 0, 0, 1) == "=$A1+B$1"

    def test_rows_untouched(self):
        assert fill_horizontal("=B4*(1+0.15)", 1, 3, 2) == "=C4*(1+0.15)"

    def test_multi_letter_columns(self):
        assert fill_horizontal("=Z1+AZ2", 0, 0, 1) == "=AA1+BA2"

    def test_fill_left(self):
        assert fill_horizontal("=C1-B1", 2, 0, 1) == "=B1-A1"

    def test_out_of_range_token_left_unmodified(self):
        assert fill_horizontal("=A1+C1", 2, 0, 0) == "=A1+A1"
        assert fill_horizontal("=XFD1+A1", 0, 0, 1) == "=XFD1+B1"

    def test_zero_delta_is_identity(self):
        for formula in ["=A1+B1", "=$a$1*b2", "=SUM(A1, B1)", "=  c3 ", "plain"]:
            assert fill_horizontal(formula, 3, 7, 3) == formula

    def test_non_formula_unchanged(self):
        assert fill_horizontal("A1+B1", 0, 0, 5) == "A1+B1"
        assert fill_horizontal("50", 0, 0, 5) == "50"

    def test_function_names_untouched(self):
        assert fill_horizontal("=SUM(A1, MAX(B1, 0))", 0, 0, 1) == "=SUM(B1, MAX(C1, 0))"
        assert fill_horizontal("=LOG10(A1)", 0, 0, 1) == "=LOG10(B1)"

    def test_numbers_untouched(self):
        assert fill_horizontal("=A1*1.5E10+B1", 0, 0, 1) == "=B1*1.5E10+C1"

    def test_preserves_spacing(self):
        assert fill_horizontal("= A1 +  B1 ", 0, 0, 1) == "= B1 +  C1 "

    def test_lowercase_references(self):
        assert fill_horizontal("=a1+$b$1", 0, 0, 1) == "=B1+$b$1"


class TestFillVertical:
    def test_shift(self):
        assert fill_vertical("=B3*0.25", 2, 2, 3) == "=B4*0.25"
        assert fill_vertical("=MAX(0,I2-H3)", 8, 2, 3) == "=MAX(0,I3-H4)"

    def test_absolute_row_preserved(self):
        assert fill_vertical("=A$1+A1", 0, 0, 4) == "=A$1+A5"

    def test_column_absolute_still_moves_down(self):
        assert fill_vertical("=$A1", 0, 0, 2) == "=$A3"

    def test_repeated_column_marker_normalized(self):
        assert fill_vertical("=$$A1", 0, 0, 1) == "=$A2"
        assert fill_horizontal("=$$A1+B1", 0, 0, 1) == "=$$A1+C1"

    def test_fill_up_clamped(self):
        assert fill_vertical("=A1+A3", 0, 2, 1) == "=A1+A2"

    def test_zero_delta_is_identity(self):
        assert fill_vertical("=A1+$B$2", 0, 5, 5) == "=A1+$B$2"


class TestShiftFormula:
    def test_paste_shifts_both_axes(self):
        assert shift_formula("=A1+$B$2+C$3+$D4", 0, 0, 1, 1) == "=B2+$B$2+D$3+$D5"

    def test_composes_axes(self):
        formula = "=A1*$B2+C$3-$D$4"
        combined = shift_formula(formula, 1, 1, 4, 6)
        assert fill_vertical(fill_horizontal(formula, 1, 1, 4), 4, 1, 6) == combined
        assert fill_horizontal(fill_vertical(formula, 1, 1, 6), 1, 6, 4) == combined
