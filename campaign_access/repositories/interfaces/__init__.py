from .user import IUserRepository
from .campaign import ICampaignRepository
from .campaign_role import ICampaignRoleRepository
