from .user import User
from .campaign import Campaign
from .campaign_role import CampaignRole

__all__ = ["User", "Campaign", "CampaignRole"]
