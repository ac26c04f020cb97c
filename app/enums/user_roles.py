from enum import Enum

class UserRole(str, Enum):
    company = "company"
    retailer = "retailer"
