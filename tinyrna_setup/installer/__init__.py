from .acquirer import InstallerAcquirer
from .checksum import ChecksumVerifier, parse_checksum_index, sha256_of

__all__ = ["ChecksumVerifier", "InstallerAcquirer", "parse_checksum_index", "sha256_of"]
