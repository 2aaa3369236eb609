"""
Test configuration for the icao-seals test suite.
"""

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from icao_seals.config import get_settings


# Test markers
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "crypto: mark test as exercising signatures")
    config.addinivalue_line("markers", "vds: mark test as VDS related")
    config.addinivalue_line("markers", "idb: mark test as IDB barcode related")


# Collection settings
def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        name = item.name.lower()
        if "sign" in name or "verify" in name:
            item.add_marker(pytest.mark.crypto)
        if "seal" in name or "vds" in name:
            item.add_marker(pytest.mark.vds)
        if "barcode" in name or "idb" in name:
            item.add_marker(pytest.mark.idb)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Isolate every test from ICAO_SEALS_* variables and cached settings."""
    import os

    for key in list(os.environ):
        if key.startswith("ICAO_SEALS_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# Test Data Classes
class SealTestVectors:
    """Published VDS and IDB samples (BSI TR-03137 / ICAO test vectors)."""

    # Residence permit, ICAO version 4, signer UTTS, certificate 5B
    RESIDENCE_PERMIT_V4 = bytes.fromhex(
        "dc03d9c5d9cac8a73a990f7134b83459fb0602305cba135875976ec066d417b59e8c6abc133c133c"
        "133c133c3fef3a2938ee43f1593d1ae52dbb26751fe64b7c133c136b0306d79519a65306ff40a1f6"
        "21437b25e0dc6177182297c47544890177ebd0e89b1d1ec9f994ed6fe60e5561fac9bc9e723ff8f6"
        "0c679f6a23b938ee6584f852476f8c72a05e3f9eb87e"
    )

    # Arrival attestation, ICAO version 3, signer UTTS, certificate 0005B
    ARRIVAL_ATTESTATION_V3 = bytes.fromhex(
        "dc02d9c5d9cac8a51a780f7134b83459fd020230a56213535bd4caecc87ca4ccaeb4133c133c133c"
        "133c133c3fef3a2938ee43f1593d1ae52dbb26751fe64b7c133c136b030859e9203833736d24ff40"
        "a353a998b785470536187860093d55325a06e66fe917bfa1f6fb62c5016c66a481ec6f2c7c18da96"
        "82f0c2e0b592f6eeb11ca6c6994b37ca2950d6fadd63264d"
    )

    ICAO_VISA = bytes.fromhex(
        "dc03d9c5d9cac8a73a990f7134b834595d01022cdd52134a74da1347c6fed95cb89f9fce133c133c"
        "133c133c203833734aaf47f0c32f1a1e20eb2625393afe310403a00000050633be1fed20c603010c"
        "0601aa0701bbff400b276b4522526b723e2140f14bef1c25048cfed9223268c24337e7a6b5b9f02b"
        "1e15c86734ef7101d983869278ce1066694dd80e8b842b82b592db6fd56c10ae"
    )

    ADDRESS_STICKER_ID = bytes.fromhex(
        "dc03d9c5d9cac8a73a990f7134b83459f9080106cf3519af974c02061a70208519a1030e395e463e"
        "740c749fad19d31efe32ff40a31bf6877ef4b1a9c49b80aa52dddad07e70f55fd5f0cead9d46aaf2"
        "abde5a5661ae81ae9fea2b99a1066294d7b758074b286e0c99b198a6b48f299d07d55443"
    )

    ADDRESS_STICKER_PASSPORT = bytes.fromhex(
        "dc03d9c5d9cac8a73a990f7134b83459f80a0106b77a38e596ce02061a203a4d1fe1030426532081"
        "ff409238e9e0323ba470be32f6d2ece1d12ee34ccc69f13efeb206d729369ae70b2a2965694e5c88"
        "c46e2bf9e8b6b28197c4e1f807af826295f1e571159e64b8bf2b"
    )

    SOCIAL_INSURANCE_CARD = bytes.fromhex(
        "dc02d9c5d9cac8a51a780f7134b83459fc0401083fee456d2de019a8020b506572736368776569c3"
        "9f03054f7363617204134ac3a2636f62c3a96e69646963747572697573ff40350f4b68832a812cb9"
        "afdd2eec0b1c6c8a5fabba3f48d4a550af0305a2d23807a9c16d0e49b65a61e294521a30b0b14a68"
        "d13b8b981667d200e9036da4e93f75"
    )

    EMERGENCY_TRAVEL_DOCUMENT = bytes.fromhex(
        "dc03d9c5d9cac8a73a990f7134b834595e0302308a0d62b9d917a4cca93ca4d0edfc133c133c133c"
        "133c133c3fef3a2938ee43f1593d1ae52dbb26751fe64b7c133c136bff403644690e5f2dd4e39b8b"
        "f10b4db669a38e60c8e6a46b3da0d7ad0f6aaf59af2326e924e4f96033ea096e89b8a5265aa9f2a3"
        "9435f17120febf9334af51618d94"
    )

    SUPPLEMENTARY_SHEET = bytes.fromhex(
        "dc03d9c5d9cac8a73a990f7134b83459fa0604305cba135875976ec066d417b59e8c6abc133c133c"
        "133c133c3fef3a2938ee43f1593d1ae52dbb26751fe64b7c133c136b0506b77519a519aaff4013f7"
        "79663cacb50187b262e8a57053c7ac4d5003c9dee6c84c96b6609e69f5e476dc69a7736725acd6a5"
        "c96e508f10fa992bb4d5f78ddff1ac405488dd7f784f"
    )

    # Public key of signer UTTS5B (brainpoolP256r1, uncompressed point)
    UTTS5B_PUBLIC_KEY = bytes.fromhex(
        "0408132A7243B3CCC29C271097081C96A729EEFB8EB93630E536498E9B7CE1CED25D68A789D93BEF"
        "39C04715C5AD3915D281C0754ECC08508BF66687EFC630DF88"
    )

    TEST_PRIVATE_KEY = bytes.fromhex(
        "548350533aa2507817ebb50a7ee8db0840d1177c932deaa1168f7f7dff311ef2"
    )

    SIGNED_ZIPPED_BARCODE = (
        "RDB1DPDNACWQAUX7WVPABAUCAGAQBACNV3CDBCICBBMFRWKZ3JNNWW64LTOV3XS635P37HASLXOZTF5L"
        "CVFHUQ7NWEO4NWVOEUZNZZ5JSVFMYIOTKGTQRP5LDIOUU2XQYP4UCMKKD3BCXTL2G2REAJT3DFD5FEPD"
        "SP7ZKYE"
    )

    SIGNED_BARCODE = (
        "RDB1BNK6ACBIEAMBACAE3LWEGCEQECCYLDMVTWS23NN5YXG5LXPF5X27X6OBEXO5TGL2WFKKPJB63MI5"
        "Y3NK4JJS3TT2TFKKZQQ5GUNHBC72WGQ5JJVPBQ7ZIEYUUHWCFPGXUNVCIATHWGKH2KI6H"
    )

    UNSIGNED_BARCODE = "RDB1ANK6GCEQECCYLDMVTWS23NN5YXG5LXPF5X27Q"

    SIGNED_PAYLOAD = bytes.fromhex(
        "6abc010504030201009b5d8861120410b0b1b2b3b4b5b6b7b8b9babbbcbdbebf7f3824bbbb332f56"
        "2a94f487db623b8db55c4a65b9cf532a959843a6a34e117f56343a94d5e187f28262943d84579af4"
        "6d44804cf6328fa523c7"
    )

    UNSIGNED_PAYLOAD = bytes.fromhex("6abc61120510b0b1b2b3b4b5b6b7b8b9babbbcbdbebf")


@pytest.fixture
def vectors():
    """Published seal and barcode samples."""
    return SealTestVectors


@pytest.fixture
def brainpool_curve():
    """Curve of the published UTTS5B samples."""
    return ec.BrainpoolP256R1()
