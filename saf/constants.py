# Archive signature (first line of every archive)
SIGNATURE = "SAF1"

# Longest line accepted for the signature and for frame length prefixes
MAX_SIGNATURE_LINE = 256
MAX_LENGTH_LINE = 32

# Header frames are small JSON blobs; anything larger is treated as garbage
MAX_HEADER_LENGTH = 1 << 20  # 1 MiB

# Payload lengths are signed 64-bit
MAX_PAYLOAD_LENGTH = (1 << 63) - 1

# Entry type tags as stored in the header blob
TYPE_FILE = "File"
TYPE_DIRECTORY = "Directory"

# Digest algorithms (names as stored in headers)
DIGEST_MD5 = "md5"
DIGEST_SHA256 = "sha256"
DIGEST_BLAKE2S = "blake2s"
DEFAULT_DIGEST = DIGEST_MD5

DEFAULT_BUFFER_SIZE = 65536
