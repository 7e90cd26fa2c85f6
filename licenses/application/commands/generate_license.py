"""
GenerateLicenseCommand.

Command to issue a license key for a purchased product.
"""

import uuid
from dataclasses import dataclass, field
from typing import Optional

from licenses.domain.services import CustomLicenseSettings


@dataclass
class GenerateLicenseCommand:
    """
    Command to generate a license key.

    ``owner_id``, when given, must be the product's owner; it is how a
    merchant is kept from issuing keys for someone else's product.
    """

    product_id: uuid.UUID
    customer_email: str
    customer_order_id: Optional[str] = None
    custom_settings: CustomLicenseSettings = field(default_factory=CustomLicenseSettings)
    owner_id: Optional[uuid.UUID] = None
    prefix: Optional[str] = None
