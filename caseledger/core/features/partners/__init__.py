# (c) Copyright Datacraft, 2026
"""Invoice parties: partners and issuing companies."""
from .db.orm import Partner, OurCompany
from .service import PartnerService, OurCompanyService

__all__ = [
	"Partner",
	"OurCompany",
	"PartnerService",
	"OurCompanyService",
]
