"""
Tests for CSV reading and writing.
"""

from contact_enricher.tabular import output_columns, read_table, write_table


class TestTabular:
    """Test CSV round trips with ragged rows."""

    def test_read_table(self, write_csv):
        path = write_csv('companies.csv', ['Company Name', 'City'], [['Acme', 'Boston'], ['Globex', '']])

        assert read_table(str(path)) == [
            {'Company Name': 'Acme', 'City': 'Boston'},
            {'Company Name': 'Globex', 'City': ''},
        ]

    def test_short_and_long_rows(self, tmp_path):
        path = tmp_path / 'ragged.csv'
        path.write_text('name,city\nAcme\nGlobex,Springfield,extra\n', encoding='utf-8')

        assert read_table(str(path)) == [
            {'name': 'Acme', 'city': ''},
            {'name': 'Globex', 'city': 'Springfield'},
        ]

    def test_byte_order_mark_is_ignored(self, tmp_path):
        path = tmp_path / 'bom.csv'
        path.write_bytes(b'\xef\xbb\xbfname\nAcme\n')

        assert read_table(str(path)) == [{'name': 'Acme'}]

    def test_output_columns_keep_first_seen_order(self):
        table = [{'name': 'Acme', 'city': ''}, {'name': '', 'city': 'NYC', 'email': 'x@y.com'}]

        assert output_columns(table) == ['name', 'city', 'email']

    def test_write_fills_missing_cells(self, tmp_path):
        path = tmp_path / 'out.csv'
        write_table([{'name': 'Acme', 'email': 'info@acme.com'}, {'name': 'Globex'}], str(path))

        assert path.read_text(encoding='utf-8').splitlines() == [
            'name,email',
            'Acme,info@acme.com',
            'Globex,',
        ]
