"""Delivery details collected at the first checkout stage."""

from pydantic import BaseModel, Field


class DeliveryDetails(BaseModel):
    address: str = Field(min_length=3, max_length=255)
    city: str = Field(min_length=2, max_length=100)
    zip_code: str = Field(min_length=5, max_length=20)
    phone_number: str = Field(min_length=10, max_length=20)
    instructions: str | None = Field(default=None, max_length=500)

    model_config = {
        "str_strip_whitespace": True,
        "json_schema_extra": {
            "examples": [
                {
                    "address": "221B Residency Road",
                    "city": "Bengaluru",
                    "zip_code": "560025",
                    "phone_number": "9876543210",
                    "instructions": "Ring the bell twice",
                }
            ]
        },
    }

    def full_address(self) -> str:
        """Single-line address stored on the order."""
        text = f"{self.address}, {self.city} {self.zip_code}. Phone: {self.phone_number}"
        if self.instructions:
            text += f". Notes: {self.instructions}"
        return text
