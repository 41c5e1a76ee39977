"""User-facing helpers: login challenge, verification status, token balance."""

from __future__ import annotations

from clrscan.ledger.context import LedgerContext


def login_message(factory_address: str) -> str:
    """Challenge a wallet signs to log in; bound to the factory address."""
    return f"Sign this message to access clr.fund at {factory_address.lower()}."


async def is_verified_user(
    ctx: LedgerContext, user_registry_address: str, wallet_address: str
) -> bool:
    return await ctx.client.call(
        user_registry_address, "UserRegistry", "isVerifiedUser", wallet_address
    )


async def get_token_balance(
    ctx: LedgerContext, token_address: str, wallet_address: str
) -> int:
    """Raw token balance of a wallet."""
    return await ctx.client.call(token_address, "ERC20", "balanceOf", wallet_address)
