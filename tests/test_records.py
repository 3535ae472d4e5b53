import pytest

from directory.services.records import DirectoryRecord, format_guid, normalize_attributes


class TestFormatGuid:
    @pytest.mark.parametrize('value, expected', [
        ('550e8400-e29b-41d4-a716-446655440000', '550E8400-E29B-41D4-A716-446655440000'),
        ('{550e8400-e29b-41d4-a716-446655440000}', '550E8400-E29B-41D4-A716-446655440000'),
        (' 550E8400-E29B-41D4-A716-446655440000 ', '550E8400-E29B-41D4-A716-446655440000'),
        ('not-a-guid', 'not-a-guid'),
        (None, ''),
    ])
    def test_string_forms(self, value, expected):
        assert format_guid(value) == expected

    def test_bytes_are_hex_encoded(self):
        raw = bytes(range(16))
        assert format_guid(raw) == '000102030405060708090a0b0c0d0e0f'


class TestNormalizeAttributes:
    def test_lowercases_keys_and_takes_first_value(self):
        attrs = normalize_attributes({'sAMAccountName': ['bob', 'bobby'], 'Mail': 'bob@example.com'})
        assert attrs == {'samaccountname': 'bob', 'mail': 'bob@example.com'}

    def test_drops_empty_multi_values(self):
        assert normalize_attributes({'mail': []}) == {}

    def test_none(self):
        assert normalize_attributes(None) == {}


class TestDirectoryRecord:
    def test_from_entry(self):
        record = DirectoryRecord.from_entry({
            'sAMAccountName': ['bob'],
            'mail': ['bob@example.com'],
            'givenName': ['Bob'],
            'sn': ['Smith'],
            'displayName': ['Bob Smith'],
            'objectGUID': ['{550e8400-e29b-41d4-a716-446655440000}'],
            'userPrincipalName': ['bob@example.com'],
            'memberOf': ['CN=Staff'],
        })
        assert record.samaccountname == 'bob'
        assert record.displayname == 'Bob Smith'
        assert record.objectguid == '550E8400-E29B-41D4-A716-446655440000'
        assert record.missing_fields() == []

    def test_missing_attributes_become_empty_strings(self):
        record = DirectoryRecord.from_entry({'sAMAccountName': 'bob'})
        assert record.mail == ''
        assert record.objectguid == ''

    def test_email_falls_back_to_upn(self):
        record = DirectoryRecord(samaccountname='bob', userprincipalname='bob@corp.local')
        assert record.email == 'bob@corp.local'
        assert record.missing_fields() == []

    def test_missing_fields(self):
        assert DirectoryRecord().missing_fields() == ['samaccountname', 'mail/userprincipalname']
        assert DirectoryRecord(mail='bob@example.com').missing_fields() == ['samaccountname']

    def test_log_dict_has_no_names(self):
        record = DirectoryRecord(samaccountname='bob', givenname='Bob')
        assert 'givenname' not in record.as_log_dict()
