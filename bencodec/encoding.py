from .objects import BDictionary, BInteger, BList, BObject, BString, to_bobject


class Encoder:
    """Encodes value objects, or plain python values, into canonical bencode."""

    def encode(self, obj) -> bytes:
        return self.encode_one(to_bobject(obj))

    def encode_one(self, obj: BObject) -> bytes:
        match obj:
            case BDictionary():
                return self.encode_dict(obj)

            case BList():
                return self.encode_list(obj)

            case BInteger():
                return self.encode_int(obj)

            case BString():
                return self.encode_string(obj)

            case _:
                raise TypeError(f"Cannot encode {type(obj).__name__}")

    def encode_string(self, s: BString) -> bytes:
        return str(len(s)).encode() + b":" + s.value

    def encode_int(self, i: BInteger) -> bytes:
        return f"i{i.value}e".encode()

    def encode_list(self, lst: BList) -> bytes:
        bstr = bytearray(b"l")
        for i in lst:
            bstr += self.encode_one(i)
        bstr += b"e"
        return bytes(bstr)

    def encode_dict(self, d: BDictionary) -> bytes:
        bstr = bytearray(b"d")
        for k, v in sorted(d.items(), key=lambda item: item[0].value):
            bstr.extend(self.encode_string(k))
            bstr.extend(self.encode_one(v))
        bstr += b"e"
        return bytes(bstr)
