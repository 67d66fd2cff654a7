"""
Tests for the 2DA text parser and writer using pytest
"""
import random

import pytest

from parsers import (
    TDAParser, TDADocument, TDARow, TDAFormatError, MISSING_VALUE,
    looks_like_2da, parse_2da, serialize_2da
)


@pytest.fixture
def warnings():
    return []


@pytest.fixture
def parser(warnings):
    """Parser that collects warnings instead of logging them"""
    return TDAParser(log=warnings.append)


@pytest.fixture
def simple_2da_content():
    """Small table with the header indented one column past the row indexes"""
    return "2DA V2.0\n\n Label  Value\n0  Foo    10\n1  Bar    ****\n"


@pytest.fixture
def messy_2da_content():
    """Tabs, quotes, a short row and an over-long row"""
    return (
        "2DA V2.0\r\n"
        "\r\n"
        "\tLABEL\tName\tDescription\r\n"
        "0\tItem1\t10\t\"First item\"\r\n"
        "1\tItem2\r\n"
        "2\tItem3\t30\tsome loose words\r\n"
    )


def _generated_2da(seed):
    """Random table with ragged rows, tabs, quotes and index-only rows"""
    rng = random.Random(seed)
    words = ['a', 'Foo', '10', '****', 'LongerLabel', '"two words"', '"x"', '0.5']

    def gap():
        return rng.choice([' ', '  ', '   ', '\t', ' \t'])

    column_count = rng.randint(1, 4)
    names = [f"Col{i}" + 'x' * rng.randint(0, 6) for i in range(column_count)]
    lines = ["2DA V2.0", ""] if rng.random() < 0.7 else ["2DA V2.0"]
    header = ' ' * rng.randint(0, 3) + names[0]
    for name in names[1:]:
        header += gap() + name
    lines.append(header + ' ' * rng.randint(0, 2))

    for position in range(rng.randint(0, 5)):
        index = rng.choice([str(position), '0' * rng.randint(1, 3), str(rng.randint(0, 999))])
        values = [rng.choice(words) for _ in range(rng.randint(0, column_count + 2))]
        line = index
        for value in values:
            line += gap() + value
        lines.append(line + ' ' * rng.randint(0, 2))

    return '\n'.join(lines) + '\n'


class TestTDAParse:
    """Test reading 2DA text"""

    def test_parse_simple_2da(self, parser, simple_2da_content, warnings):
        doc = parser.parse(simple_2da_content)

        assert doc.columns == ['Label', 'Value']
        assert doc.row_count == 2
        assert doc.rows[0].index == '0'
        assert doc.rows[0].values == ['Foo', '10']
        assert doc.rows[1].values == ['Bar', '****']
        assert warnings == []

    def test_header_positions_recorded(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)

        assert doc.header_indent == 1
        assert doc.header_token_starts == [1, 8]
        assert doc.header_visual_length == 13
        assert doc.index_width == 3
        assert doc.column_widths == [7, 5]

    def test_missing_value_reads_as_none(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)

        assert doc.get_value(1, 'Value') is None
        assert doc.get_value(0, 'value') == '10'
        assert doc.get_value(0, 'Nope') is None
        assert doc.get_value(5, 0) is None

    def test_quotes_stay_in_values(self, parser, messy_2da_content):
        doc = parser.parse(messy_2da_content)

        assert doc.columns == ['LABEL', 'Name', 'Description']
        assert doc.rows[0].values == ['Item1', '10', '"First item"']

    def test_short_row_padded(self, parser, messy_2da_content, warnings):
        doc = parser.parse(messy_2da_content)

        assert doc.rows[1].values == ['Item2', MISSING_VALUE, MISSING_VALUE]
        assert any('Row 1 is missing 2 value(s)' in w for w in warnings)

    def test_long_row_folded_into_last_column(self, parser, messy_2da_content, warnings):
        doc = parser.parse(messy_2da_content)

        assert doc.rows[2].values == ['Item3', '30', 'some loose words']
        assert any('Row 2 has extra tokens' in w for w in warnings)

    def test_every_row_has_one_value_per_column(self, parser, messy_2da_content):
        doc = parser.parse(messy_2da_content)
        for row in doc.rows:
            assert len(row.values) == len(doc.columns)

    def test_blank_lines_skipped(self, parser):
        doc = parser.parse("2DA V2.0\n\n\nA B\n\n0 x y\n\n1 z w\n")
        assert doc.columns == ['A', 'B']
        assert [row.index for row in doc.rows] == ['0', '1']

    def test_row_index_kept_verbatim(self, parser):
        doc = parser.parse("2DA V2.0\n\nA\nabc x\n0007 y\n")
        assert [row.index for row in doc.rows] == ['abc', '0007']

    def test_missing_column_line(self, parser, warnings):
        doc = parser.parse("2DA V2.0\n")
        assert doc.columns == []
        assert doc.rows == []
        assert "No column header line found." in warnings

    def test_lenient_header(self, parser, warnings):
        doc = parser.parse("NOT A TABLE\nA B\n0 x y\n")

        assert doc.columns == ['A', 'B']
        assert doc.rows[0].values == ['x', 'y']
        assert any('Missing 2DA header' in w for w in warnings)

    def test_strict_header(self):
        parser = TDAParser(log=lambda message: None, strict_header=True)
        with pytest.raises(TDAFormatError, match="Missing 2DA header"):
            parser.parse("NOT A TABLE\nA B\n0 x y\n")

    def test_strict_header_accepts_2da(self, simple_2da_content):
        parser = TDAParser(strict_header=True)
        assert parser.parse(simple_2da_content).columns == ['Label', 'Value']

    def test_parse_file(self, parser, simple_2da_content, tmp_path):
        path = tmp_path / 'test.2da'
        path.write_bytes(b'\xef\xbb\xbf' + simple_2da_content.encode('utf-8'))

        doc = parser.parse_file(path)
        assert doc.columns == ['Label', 'Value']

    def test_parse_file_missing(self, parser, tmp_path):
        with pytest.raises(FileNotFoundError):
            parser.parse_file(tmp_path / 'missing.2da')

    def test_looks_like_2da(self):
        assert looks_like_2da("\n  2da v2.0\nA B\n")
        assert not looks_like_2da("Label Value\n0 x y\n")
        assert not looks_like_2da("")


class TestTDASerialize:
    """Test writing 2DA text back"""

    def test_round_trip_is_byte_exact(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)
        assert parser.serialize(doc) == simple_2da_content

    def test_serialize_is_pure(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)
        first = parser.serialize(doc)
        assert parser.serialize(doc) == first
        assert doc.header_token_starts == [1, 8]

    def test_idempotent(self, parser, messy_2da_content):
        once = parser.serialize(parser.parse(messy_2da_content))
        twice = parser.serialize(parser.parse(once))
        assert twice == once

    def test_idempotent_when_header_is_flush_left(self, parser):
        once = parser.serialize(parser.parse("2DA V2.0\nLabel Name\n0 a b\n10 longer c\n"))
        assert once == "2DA V2.0\n\nLabel Name\n0  a     b\n10 longer c\n"
        assert parser.serialize(parser.parse(once)) == once

    def test_idempotent_with_index_only_rows(self, parser):
        once = parser.serialize(parser.parse("2DA V2.0\n\n0 \n0 \n00 \n"))

        assert once.split('\n')[3:] == ["0  ****", "00 ****", ""]
        assert parser.serialize(parser.parse(once)) == once

    @pytest.mark.parametrize("seed", range(50))
    def test_idempotent_on_generated_tables(self, seed):
        content = _generated_2da(seed)
        once = serialize_2da(parse_2da(content))
        doc = parse_2da(once)

        assert serialize_2da(doc) == once
        assert all(len(row.values) == len(doc.columns) for row in doc.rows)

    def test_index_spacing_kept_in_header_layout(self, parser):
        content = "2DA V2.0\n\n  A B\n0    x y\n"
        text = parser.serialize(parser.parse(content))

        assert text == content
        header, row = text.split('\n')[2:4]
        assert header.index('A') == 2
        assert row.index('x') == 5

    def test_values_survive_round_trip(self, parser, messy_2da_content):
        doc = parser.parse(messy_2da_content)
        again = parser.parse(parser.serialize(doc))

        assert again.columns == doc.columns
        assert [row.values for row in again.rows] == [row.values for row in doc.rows]

    def test_output_uses_version_line_and_lf(self, parser, messy_2da_content):
        text = parser.serialize(parser.parse(messy_2da_content))

        assert text.startswith("2DA V2.0\n\n")
        assert '\r' not in text
        assert text.endswith('\n')

    def test_columns_never_overlap(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)
        doc.set_value(0, 0, 'AVeryLongLabelValue')

        again = parser.parse(parser.serialize(doc))
        assert again.rows[0].values == ['AVeryLongLabelValue', '10']
        assert again.rows[1].values == ['Bar', '****']

    def test_document_without_header_positions(self):
        doc = TDADocument(columns=['A', 'B'])
        doc.insert_row(0, values=['x', 'yy'])

        assert serialize_2da(doc) == "2DA V2.0\n\n  A B\n0 x yy\n"

    def test_blank_index_written_as_position(self):
        doc = TDADocument(columns=['A'])
        doc.rows.append(TDARow(index='', values=['x']))
        doc.rows.append(TDARow(index='  ', values=['y']))

        again = parse_2da(serialize_2da(doc))
        assert [row.index for row in again.rows] == ['0', '1']


class TestTDAWidths:
    """Test that column widths only grow while editing"""

    def test_refresh_widths_keeps_wide_column(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)

        doc.set_value(0, 0, 'VeryLongName')
        parser.refresh_widths(doc)
        assert doc.column_widths[0] == 12
        assert doc.header_token_starts == [1, 13]

        doc.set_value(0, 0, 'Foo')
        parser.refresh_widths(doc)
        assert doc.column_widths[0] == 12
        assert doc.header_token_starts == [1, 13]

        header = parser.serialize(doc).split('\n')[2]
        assert header.index('Value') == 13

    def test_refresh_widths_is_noop_on_fresh_parse(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)
        parser.refresh_widths(doc)
        assert parser.serialize(doc) == simple_2da_content


class TestTDAEdits:
    """Test positional document edits"""

    def test_set_blank_value_becomes_missing(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)
        doc.set_value(0, 1, '   ')
        assert doc.rows[0].values[1] == MISSING_VALUE

    def test_add_column(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)
        position = doc.add_column('Extra')

        assert position == 2
        assert doc.header_token_starts == [1, 8, 14]

        again = parser.parse(parser.serialize(doc))
        assert again.columns == ['Label', 'Value', 'Extra']
        assert again.rows[0].values == ['Foo', '10', MISSING_VALUE]
        assert again.get_value(0, 'Extra') is None

    def test_add_column_with_default(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)
        doc.add_column('Flag', default='1')
        assert [row.values[2] for row in doc.rows] == ['1', '1']

    def test_remove_column(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)
        doc.remove_column(0)

        assert doc.columns == ['Value']
        assert doc.rows[0].values == ['10']

        again = parser.parse(parser.serialize(doc))
        assert again.columns == ['Value']
        assert again.rows[1].values == [MISSING_VALUE]

    def test_remove_duplicate_named_column_by_position(self, parser):
        doc = parser.parse("2DA V2.0\n\nA A\n0 x y\n")
        doc.remove_column(1)

        assert doc.columns == ['A']
        assert doc.rows[0].values == ['x']

    def test_remove_column_out_of_range(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)
        with pytest.raises(IndexError):
            doc.remove_column(5)

    def test_insert_row(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)
        row = doc.insert_row(1, values=['Baz'])

        assert row.index == '1'
        assert row.values == ['Baz', MISSING_VALUE]
        assert [r.values[0] for r in doc.rows] == ['Foo', 'Baz', 'Bar']

        again = parser.parse(parser.serialize(doc))
        assert [r.index for r in again.rows] == ['0', '1', '1']

    def test_delete_row(self, parser, simple_2da_content):
        doc = parser.parse(simple_2da_content)
        removed = doc.delete_row(0)

        assert removed.values == ['Foo', '10']
        assert doc.row_count == 1
