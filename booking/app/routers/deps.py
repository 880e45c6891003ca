from fastapi import Header


async def current_customer(x_customer_id: str = Header(min_length=1)) -> str:
    """Customer id forwarded by the authentication layer in front of this API."""
    return x_customer_id
