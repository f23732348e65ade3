"""
Bitcoin-style signed messages (the scheme behind `signmessage` in Bitcoin Core,
Electrum and bitcoinjs-message).

A signature is base64 of 65 bytes: one header byte followed by r || s.
The header carries the public key recovery id and the address kind:

    27-30  P2PKH, uncompressed public key
    31-34  P2PKH, compressed public key
    35-38  P2SH-P2WPKH (segwit wrapped in P2SH), compressed public key
    39-42  P2WPKH (native segwit, bech32), compressed public key

Verification recovers the one public key named by the recovery id and
compares its HASH160 with the payload of the claimed Base58Check address or
the witness program of the claimed bech32 address.
"""

import base64
import binascii
import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Tuple

import base58
import bech32
from Crypto.Hash import RIPEMD160
from ecdsa import SECP256k1, SigningKey, VerifyingKey
from ecdsa.util import sigdecode_string, sigencode_string_canonize

logger = logging.getLogger(__name__)

MESSAGE_MAGIC = b"\x18Bitcoin Signed Message:\n"

P2PKH_VERSIONS = (0x00, 0x6F)       # mainnet '1...', testnet 'm.../n...'
P2SH_VERSIONS = (0x05, 0xC4)        # mainnet '3...', testnet '2...'
WIF_MAINNET = 0x80
WIF_TESTNET = 0xEF
SEGWIT_HRPS = ("bc", "tb")       # mainnet, testnet


def sha256d(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))."""
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()


def _varint(n: int) -> bytes:
    if n < 0xFD:
        return bytes([n])
    if n <= 0xFFFF:
        return b"\xfd" + n.to_bytes(2, "little")
    if n <= 0xFFFFFFFF:
        return b"\xfe" + n.to_bytes(4, "little")
    return b"\xff" + n.to_bytes(8, "little")


def magic_hash(message: str) -> bytes:
    """Digest that wallets actually sign for a text message."""
    msg = message.encode("utf-8")
    return sha256d(MESSAGE_MAGIC + _varint(len(msg)) + msg)


def recover_public_keys(digest: bytes, rs: bytes) -> List[VerifyingKey]:
    """Candidate public keys for a 64-byte r || s signature over digest."""
    return VerifyingKey.from_public_key_recovery_with_digest(
        rs, digest, SECP256k1, hashfunc=hashlib.sha256, sigdecode=sigdecode_string
    )


def decode_address(address: str) -> Tuple[int, bytes]:
    """Split a Base58Check address into (version byte, 20-byte hash)."""
    raw = base58.b58decode_check(address)
    if len(raw) != 21:
        raise ValueError(f"Unexpected address payload length {len(raw)}")
    return raw[0], raw[1:]


def decode_segwit_address(address: str) -> bytes:
    """20-byte witness program of a version 0 P2WPKH bech32 address."""
    for hrp in SEGWIT_HRPS:
        witver, witprog = bech32.decode(hrp, address)
        if witver is not None:
            break
    else:
        raise ValueError("Not a bech32 segwit address")
    if witver != 0 or len(witprog) != 20:
        raise ValueError(f"Unsupported witness version {witver} or program length {len(witprog)}")
    return bytes(witprog)


class SignatureVerifier(ABC):
    """Checks that signature was made over message by the key behind address."""

    @abstractmethod
    def verify(self, message: str, address: str, signature: str) -> bool:
        pass


class BitcoinMessageVerifier(SignatureVerifier):

    def verify(self, message: str, address: str, signature: str) -> bool:
        try:
            sig = base64.b64decode(signature, validate=True)
        except (binascii.Error, ValueError, TypeError):
            logger.debug("Signature is not valid base64")
            return False
        if len(sig) != 65:
            logger.debug("Signature has length %d, expected 65", len(sig))
            return False

        header = sig[0]
        if not 27 <= header <= 42:
            logger.debug("Unsupported signature header %d", header)
            return False
        recid = (header - 27) & 3
        compressed = header >= 31
        segwit_p2sh = 35 <= header <= 38
        segwit_native = header >= 39

        try:
            if segwit_native:
                expected_hash = decode_segwit_address(address)
            else:
                version, expected_hash = decode_address(address)
                allowed_versions = P2SH_VERSIONS if segwit_p2sh else P2PKH_VERSIONS
                if version not in allowed_versions:
                    return False
        except ValueError as e:
            logger.debug("Cannot decode address %r: %s", address, e)
            return False

        encoding = "compressed" if compressed else "uncompressed"
        try:
            candidates = recover_public_keys(magic_hash(message), sig[1:])
            if recid >= len(candidates):
                return False
            public_key = candidates[recid].to_string(encoding)
        except Exception as e:
            # r/s out of range or no curve point for r
            logger.debug("Public key recovery failed: %s", e)
            return False

        key_hash = hash160(public_key)
        if segwit_p2sh:
            key_hash = hash160(b"\x00\x14" + key_hash)
        return key_hash == expected_hash


def verify_message(message: str, address: str, signature: str) -> bool:
    return BitcoinMessageVerifier().verify(message, address, signature)


@dataclass(frozen=True)
class WalletKey:
    """secp256k1 private key with P2PKH address and message signing."""
    private_key: bytes = field(repr=False)
    compressed: bool = True
    testnet: bool = False

    @classmethod
    def generate(cls, testnet: bool = False) -> "WalletKey":
        sk = SigningKey.generate(curve=SECP256k1)
        return cls(private_key=sk.to_string(), compressed=True, testnet=testnet)

    @classmethod
    def from_wif(cls, wif: str) -> "WalletKey":
        raw = base58.b58decode_check(wif)
        if len(raw) not in (33, 34):
            raise ValueError(f"Unexpected WIF payload length {len(raw)}")
        if raw[0] not in (WIF_MAINNET, WIF_TESTNET):
            raise ValueError(f"Unknown WIF version byte {raw[0]:#04x}")
        if len(raw) == 34 and raw[33] == 0x01:
            compressed = True
        elif len(raw) == 33:
            compressed = False
        else:
            raise ValueError("Malformed WIF payload")
        return cls(private_key=raw[1:33], compressed=compressed, testnet=raw[0] == WIF_TESTNET)

    def to_wif(self) -> str:
        version = WIF_TESTNET if self.testnet else WIF_MAINNET
        payload = bytes([version]) + self.private_key + (b"\x01" if self.compressed else b"")
        return base58.b58encode_check(payload).decode("ascii")

    def _signing_key(self) -> SigningKey:
        return SigningKey.from_string(self.private_key, curve=SECP256k1)

    @property
    def public_key(self) -> bytes:
        vk = self._signing_key().get_verifying_key()
        return vk.to_string("compressed" if self.compressed else "uncompressed")

    @property
    def address(self) -> str:
        version = P2PKH_VERSIONS[1] if self.testnet else P2PKH_VERSIONS[0]
        return base58.b58encode_check(bytes([version]) + hash160(self.public_key)).decode("ascii")

    @property
    def segwit_address(self) -> str:
        """Native segwit (P2WPKH) address. Needs a compressed key."""
        if not self.compressed:
            raise ValueError("Segwit addresses require a compressed public key")
        hrp = SEGWIT_HRPS[1] if self.testnet else SEGWIT_HRPS[0]
        return bech32.encode(hrp, 0, hash160(self.public_key))

    def sign_message(self, message: str, segwit: bool = False) -> str:
        """
        Base64 compact signature over message, verifiable against self.address,
        or against self.segwit_address when segwit is set.
        """
        if segwit and not self.compressed:
            raise ValueError("Segwit signatures require a compressed public key")
        sk = self._signing_key()
        digest = magic_hash(message)
        rs = sk.sign_digest_deterministic(
            digest, hashfunc=hashlib.sha256, sigencode=sigencode_string_canonize
        )
        own = sk.get_verifying_key().to_string()
        recid = next(
            i for i, vk in enumerate(recover_public_keys(digest, rs)) if vk.to_string() == own
        )
        header = 27 + recid + (4 if self.compressed else 0) + (8 if segwit else 0)
        return base64.b64encode(bytes([header]) + rs).decode("ascii")
