# examples/star_registry_demo.py
# Run with: python examples/star_registry_demo.py
#
# Registers stars for two wallets, then tampers with a block to show detection.

from starledger import (
    Blockchain,
    StarRegistry,
    WalletKey,
    ChainVerifier,
    ChainIntegrityError,
    InvalidSignatureError,
)


if __name__ == "__main__":
    blockchain = Blockchain()
    registry = StarRegistry(blockchain)

    alice = WalletKey.generate()
    bob = WalletKey.generate()

    for wallet, story in [(alice, "Found while camping"), (bob, "First star I named"), (alice, "Second one")]:
        message = registry.request_message_ownership_verification(wallet.address)
        signature = wallet.sign_message(message)
        block = registry.submit_star(wallet.address, message, signature, {"ra": "16h 29m 1.0s", "story": story})
        print(f"Block {block.height}: {block.hash[:16]}… owner={wallet.address}")

    print(f"\nChain height: {registry.get_chain_height()}")
    print(f"Alice owns {len(registry.get_stars_by_wallet_address(alice.address))} stars")

    # Bob cannot claim a star for Alice
    message = registry.request_message_ownership_verification(alice.address)
    try:
        registry.submit_star(alice.address, message, bob.sign_message(message), {"story": "stolen"})
    except InvalidSignatureError as e:
        print(f"\nRejected: {e}")

    # Tamper with block 1 in place
    blockchain.get_block_by_height(1).body = "7b226f776e6572223a226576696c227d"
    try:
        blockchain.validate_chain()
    except ChainIntegrityError as e:
        print(f"\n{e}")

    print("\n" + str(ChainVerifier().verify(blockchain.chain)))
