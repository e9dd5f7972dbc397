from .sqlalchemy_user_repository import SqlalchemyUserRepository
from .sqlalchemy_campaign_repository import SqlalchemyCampaignRepository
from .sqlalchemy_campaign_role_repository import SqlalchemyCampaignRoleRepository
