# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""Test suite for util.hexutil"""

from dcmtrace.util.hexutil import hex2bytes, bytes2hex


class TestHexUtil:
    """Test the hex helpers"""
    def test_hex_to_bytes(self):
        """Test converting hex to bytes."""
        assert b'\x00' == hex2bytes('00')
        assert b'\x00\x01' == hex2bytes('00 01')
        assert b'\x07\xfe\x00\x10' == hex2bytes('07 fe 00 10')
        assert b'\xfe\xff\x00\xe0' == hex2bytes(b'fe ff 00 e0')

    def test_bytes_to_hex(self):
        """Test converting bytes to hex."""
        assert '' == bytes2hex(b'')
        assert '00' == bytes2hex(b'\x00')
        assert '07 fe 00 10' == bytes2hex(b'\x07\xfe\x00\x10')
        assert '44 49 43 4d' == bytes2hex(b'DICM')
