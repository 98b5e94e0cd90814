#!/usr/bin/env python3
"""
Wallet Core Demonstration Driver

Replays the reference sequence against a fresh in-memory directory and
prints every response: register, sign in, change password, add a token,
plain transfer, transfer with history.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from wallet_core.config import get_config
from wallet_core.directory import AccountDirectory
from wallet_core.logging_config import setup_logging


def main() -> int:
    config = get_config()
    setup_logging(config.log_level, "wallet", config.log_format, config.log_file)

    directory = AccountDirectory(config=config)

    print("👛 Starting Wallet Core demo...")
    print(directory.register("user1", "password123", "password123").to_dict())
    print(directory.authenticate("user1", "password123").to_dict())
    print(directory.change_password("user1", "password123", "newpassword").to_dict())

    print(directory.register("user2", "secret456", "secret456").to_dict())
    sender = directory.get_user_by_login("user1")
    receiver = directory.get_user_by_login("user2")

    print(directory.add_token(sender.uid, "ETH", 10).to_dict())
    print(directory.add_token(sender.uid, "BTC", 20).to_dict())
    print(directory.add_token(receiver.uid, "BTC", 5).to_dict())

    print(directory.transfer(sender.uid, receiver.uid, 5, "BTC").to_dict())
    print(directory.transfer_with_history(receiver.uid, sender.uid, 5, "BTC").to_dict())

    # Unknown uids, as in the original script
    print(directory.add_token("uid123", "ETH", 10).to_dict())
    print(directory.transfer("senderUID123", "receiverUID456", 5, "BTC").to_dict())

    print()
    print("📒 History of user1:", directory.get_transaction_history(sender.uid))
    print("🔒 Audit chain valid:", directory.verify_integrity()['valid'])
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n👋 Interrupted")
