import struct

import pytest

from stakepool.borsh import BorshWriter, IncrementalReader


class TestReader:
    def test_read_scalars(self):
        data = bytes([7]) + struct.pack("<IQq", 70000, 2**40, -3)
        r = IncrementalReader(data)
        assert r.read_u8() == 7
        assert r.read_u32() == 70000
        assert r.read_u64() == 2**40
        assert r.read_i64() == -3
        assert r.offset == len(data)
        assert r.remaining == 0

    def test_read_pubkey_raw(self):
        r = IncrementalReader(bytes(range(32)) + b"\xff")
        assert r.read_pubkey_raw() == bytes(range(32))
        assert r.remaining == 1

    def test_read_option(self):
        r = IncrementalReader(b"\x00\x01\x09")
        assert r.read_option(r.read_u8) is None
        assert r.read_option(r.read_u8) == 9

    def test_read_option_bad_tag(self):
        r = IncrementalReader(b"\x02\x09")
        with pytest.raises(ValueError, match="invalid option tag 2"):
            r.read_option(r.read_u8)

    def test_short_read(self):
        r = IncrementalReader(b"\x01\x02\x03")
        with pytest.raises(ValueError, match="not enough data for u64"):
            r.read_u64()
        assert r.offset == 0

    def test_reads_memoryview(self):
        r = IncrementalReader(memoryview(struct.pack("<Q", 5)))
        assert r.read_u64() == 5


class TestWriter:
    def test_mirrors_reader(self):
        w = BorshWriter()
        w.write_u8(7)
        w.write_u32(70000)
        w.write_u64(2**40)
        w.write_i64(-3)
        w.write_option(None, w.write_u8)
        w.write_option(9, w.write_u8)
        assert w.to_bytes() == bytes([7]) + struct.pack("<IQq", 70000, 2**40, -3) + b"\x00\x01\x09"
        assert len(w) == 24

    @pytest.mark.parametrize(
        "method,value",
        [
            ("write_u8", 256),
            ("write_u8", -1),
            ("write_u32", 2**32),
            ("write_u64", 2**64),
            ("write_i64", 2**63),
        ],
    )
    def test_out_of_range(self, method, value):
        w = BorshWriter()
        with pytest.raises(ValueError, match="out of range"):
            getattr(w, method)(value)

    def test_pubkey_length(self):
        w = BorshWriter()
        with pytest.raises(ValueError, match="32 bytes"):
            w.write_pubkey_raw(bytes(31))
