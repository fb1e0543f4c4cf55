from visualgenie.utils.data_uri import encode_data_uri, decode_data_uri

__all__ = ["encode_data_uri", "decode_data_uri"]
