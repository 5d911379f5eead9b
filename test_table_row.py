"""Tests for span resolution and row flags."""
import pytest

from table_cleaner.row import CleanType, RowStateError, TableRow


def cell(content="", name="td", **attrs):
    attribs = "".join(f' {key}="{value}"' for key, value in attrs.items())
    return {"name": name, "attribs": attribs, "content": content}


def make_grid(count, open_tag="<tr>"):
    return [TableRow(open_tag) for _ in range(count)]


def test_span_projection_fills_the_covered_rectangle():
    grid = make_grid(4)
    grid[1].add_raw_cells(grid, 1, [cell("A", rowspan=2, colspan=2), cell("B")])

    origin = grid[1].cells[0]
    assert origin.parent is None
    assert grid[1].cells[1].parent is origin
    assert grid[2].cells[0].parent is origin
    assert grid[2].cells[1].parent is origin
    assert sorted(grid[1].cells) == [0, 1, 2]
    assert sorted(grid[2].cells) == [0, 1]
    assert grid[0].cells == {}
    assert grid[3].cells == {}
    assert grid[1].cells[2].content == "B"
    assert grid[1].cell_count == 2
    assert grid[2].cell_count == 0


def test_span_past_last_row_is_truncated():
    grid = make_grid(2)
    grid[1].add_raw_cells(grid, 1, [cell("A", rowspan=5)])
    assert len(grid) == 2
    assert list(grid[1].cells) == [0]
    assert grid[0].cells == {}


def test_later_rows_skip_reserved_columns():
    grid = make_grid(2)
    grid[0].add_raw_cells(grid, 0, [cell("A", rowspan=2), cell("B")])
    grid[1].add_raw_cells(grid, 1, [cell("C")])

    assert grid[1].cells[1].content == "C"
    assert grid[1].cell_count == 1
    assert grid[1].get_column_count() == 2


def test_header_flag_is_a_running_and():
    grid = make_grid(2)
    grid[0].add_raw_cells(grid, 0, [cell("a", "th"), cell("b", "th"), cell("c")])
    grid[1].add_raw_cells(grid, 1, [cell("a", "th"), cell("b", "th")])
    assert grid[0].is_header is False
    assert grid[1].is_header is True


def test_content_ignores_header_cells():
    grid = make_grid(2)
    grid[0].add_raw_cells(grid, 0, [cell("Head", "th"), cell("  ")])
    grid[1].add_raw_cells(grid, 1, [cell("Head", "th"), cell("  "), cell("x")])
    assert grid[0].has_content is False
    assert grid[1].has_content is True


def test_decrement_rowspan_once_per_origin():
    grid = make_grid(3)
    grid[0].add_raw_cells(grid, 0, [cell("A", rowspan=3, colspan=3)])
    origin = grid[0].cells[0]
    assert [c.parent for c in grid[1].cells.values()] == [origin, origin, origin]

    grid[1].decrement_rowspan()
    assert origin.rowspan == 2


def test_decrement_rowspan_touches_each_distinct_origin():
    grid = make_grid(2)
    grid[0].add_raw_cells(grid, 0, [cell("A", rowspan=2), cell("B", rowspan=2, colspan=2)])
    grid[1].decrement_rowspan()
    assert grid[0].cells[0].rowspan == 1
    assert grid[0].cells[1].rowspan == 1


def test_to_html_round_trip():
    row = TableRow('<tr class="x" data-cleantype="keep">')
    assert row.to_html() == '<tr class="x" data-cleantype="keep">\n</tr>\n'

    grid = [row]
    row.add_raw_cells(grid, 0, [cell("a"), cell("b", "th")])
    assert row.to_html() == '<tr class="x" data-cleantype="keep">\n<td>a</td>\n<th>b</th>\n</tr>\n'


def test_to_html_skips_span_references_and_shows_shrunk_span():
    grid = make_grid(3)
    grid[0].add_raw_cells(grid, 0, [cell("A", rowspan=3)])
    grid[1].add_raw_cells(grid, 1, [])
    grid[2].add_raw_cells(grid, 2, [])

    grid[2].decrement_rowspan()
    assert grid[0].to_html() == '<tr>\n<td rowspan="2">A</td>\n</tr>\n'
    assert grid[1].to_html() == "<tr>\n</tr>\n"


def test_multi_column_images_are_protected():
    grid = make_grid(2)
    grid[0].add_raw_cells(grid, 0, [cell('<img src="a.png">', colspan=2)])
    grid[1].add_raw_cells(grid, 1, [cell('<img src="a.png">')])

    for row in grid:
        row.update_has_content(True)
    assert grid[0].has_content is True
    assert grid[1].has_content is False

    grid[1].update_has_content(False)
    assert grid[1].has_content is True


def test_update_has_content_ignores_headers_and_span_references():
    grid = make_grid(2)
    grid[0].add_raw_cells(grid, 0, [cell("Head", "th", rowspan=2), cell("")])
    grid[1].add_raw_cells(grid, 1, [cell(" ")])
    grid[0].update_has_content(False)
    grid[1].update_has_content(False)
    assert grid[0].has_content is False
    assert grid[1].has_content is False


@pytest.mark.parametrize(
    ("open_tag", "expected"),
    [
        ("<tr>", CleanType.AUTO),
        ('<tr data-cleantype="keep">', CleanType.KEEP),
        ("<tr class=a data-cleantype=Header>", CleanType.HEADER),
        ("<tr data-cleantype='tableheader'>", CleanType.TABLEHEADER),
        ('<tr data-cleantype="bogus">', CleanType.AUTO),
    ],
)
def test_clean_type_from_open_tag(open_tag, expected):
    assert TableRow(open_tag).clean_type is expected


def test_rows_are_populated_only_once():
    grid = make_grid(1)
    grid[0].add_raw_cells(grid, 0, [cell("a")])
    with pytest.raises(RowStateError):
        grid[0].add_raw_cells(grid, 0, [cell("b")])


def test_row_index_must_point_at_the_row():
    grid = make_grid(2)
    with pytest.raises(AssertionError):
        grid[0].add_raw_cells(grid, 1, [cell("a")])


def test_out_of_order_population_cannot_reserve_columns():
    grid = make_grid(2)
    grid[1].add_raw_cells(grid, 1, [cell("C")])
    grid[0].add_raw_cells(grid, 0, [cell("A", rowspan=2)])

    # The span from row 0 arrives too late: row 1 already placed C in column 0.
    assert grid[1].cells[0].content == "C"
    assert grid[1].cells[0].parent is None
    assert grid[1].get_column_count() == 1


def test_overlapping_spans_keep_the_first_claim():
    grid = make_grid(2)
    grid[0].add_raw_cells(grid, 0, [cell("A"), cell("B", rowspan=2)])
    grid[1].add_raw_cells(grid, 1, [cell("C", colspan=3)])

    b = grid[0].cells[1]
    c = grid[1].cells[0]
    assert grid[1].cells[1].parent is b
    assert grid[1].cells[2].parent is c
    assert grid[1].cell_count == 1
