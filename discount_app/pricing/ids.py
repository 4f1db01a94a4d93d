GID_PREFIX = "gid://"


def normalize_product_id(product_id) -> str:
    """Strip a platform global id down to its trailing catalog id.

    ``gid://shopify/Product/123`` becomes ``123``; plain ids pass through.
    """
    value = str(product_id).strip()
    if value.startswith(GID_PREFIX):
        value = value.rstrip("/").rsplit("/", 1)[-1]
    return value
