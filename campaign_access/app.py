# campaign_access/app.py
from wsgiref.simple_server import make_server
import json
import logging
import re

from pydantic import ValidationError

from campaign_access import config
from campaign_access.database.database import SessionLocal
from campaign_access.logging_config import setup_logging
from campaign_access.repositories.sqlalchemy import (
    SqlalchemyUserRepository, SqlalchemyCampaignRepository, SqlalchemyCampaignRoleRepository
)
from campaign_access.schemas import (
    TokenRequest, UserCreateRequest, CampaignCreateRequest, CampaignUpdateRequest,
    MemberAddRequest, MemberUpdateRequest
)
from campaign_access.services.campaign_service import CampaignService
from campaign_access.services.identity_service import IdentityService
from campaign_access.services.membership_service import MembershipService
from campaign_access.services.permission_service import PermissionService
from campaign_access.services.exceptions import *

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def get_request_data(environ):
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
        return json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
    except (ValueError, json.JSONDecodeError):
        raise ValueError("Invalid or missing JSON body.")

def parse_body(environ, schema):
    """요청 본문을 읽어 지정된 Pydantic 모델로 검증합니다."""
    return schema.model_validate(get_request_data(environ))

def authorize_and_get_user_id(environ):
    auth_token = environ.get('HTTP_X_AUTH_TOKEN')
    if not auth_token:
        raise TokenInvalidError("Missing 'X-Auth-Token' header.")
    identity_service = environ['services']['identity']
    return identity_service.validate_token(auth_token)['user_id']

ERROR_MAP = {
    TokenInvalidError: "401 Unauthorized",
    AuthenticationError: "401 Unauthorized",
    CampaignAccessDeniedError: "403 Forbidden",
    CampaignNotFoundError: "404 Not Found",
    UserNotFoundError: "404 Not Found",
    MemberNotFoundError: "404 Not Found",
    ValueError: "400 Bad Request",
    ValidationError: "400 Bad Request",
    InvalidRoleError: "400 Bad Request",
    InvalidPermissionError: "400 Bad Request",
    OwnerRemovalForbiddenError: "400 Bad Request",
    SelfRemovalError: "400 Bad Request",
    MemberAlreadyExistsError: "400 Bad Request",
    UserCreationError: "400 Bad Request",
}

def handle_exception(e):
    status = ERROR_MAP.get(type(e), "500 Internal Server Error")
    if status.startswith("500"):
        logger.exception("Unhandled error while processing request")
        return status, json.dumps({"error": "Internal server error"})
    if isinstance(e, ValidationError):
        body = {"error": "Invalid request body.", "details": e.errors(include_url=False)}
        return status, json.dumps(body, default=str)
    return status, json.dumps({"error": str(e)})

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

ID = r'([A-Za-z0-9_-]+)'

def create_app(session_factory=SessionLocal):
    """
    세션 팩토리를 받아 WSGI 애플리케이션을 생성합니다.
    요청마다 새 DB 세션과 서비스 객체를 만들고, 응답 후 세션을 닫습니다.
    """
    routes = [
        ('POST', r'^/v1/auth/tokens$', auth_tokens_handler),
        ('POST', r'^/v1/users$', create_user_handler),
        ('GET', r'^/v1/users/me$', get_current_user_handler),
        ('POST', r'^/v1/campaigns$', create_campaign_handler),
        ('GET', r'^/v1/campaigns$', list_campaigns_handler),
        ('GET', rf'^/v1/campaigns/{ID}$', get_campaign_handler),
        ('PATCH', rf'^/v1/campaigns/{ID}$', update_campaign_handler),
        ('DELETE', rf'^/v1/campaigns/{ID}$', delete_campaign_handler),
        ('GET', rf'^/v1/campaigns/{ID}/permissions$', get_permissions_handler),
        ('GET', rf'^/v1/campaigns/{ID}/members$', list_members_handler),
        ('POST', rf'^/v1/campaigns/{ID}/members$', add_member_handler),
        ('PATCH', rf'^/v1/campaigns/{ID}/members/{ID}$', update_member_handler),
        ('DELETE', rf'^/v1/campaigns/{ID}/members/{ID}$', remove_member_handler),
        ('POST', rf'^/v1/campaigns/{ID}/leave$', leave_campaign_handler),
    ]

    def application(environ, start_response):
        db_session = session_factory()
        try:
            # 1. 의존성 생성 (Repositories -> Services)
            user_repo = SqlalchemyUserRepository(db_session)
            campaign_repo = SqlalchemyCampaignRepository(db_session)
            role_repo = SqlalchemyCampaignRoleRepository(db_session)

            permission_service = PermissionService(role_repo)
            environ['services'] = {
                'identity': IdentityService(user_repo),
                'permission': permission_service,
                'campaign': CampaignService(campaign_repo, permission_service),
                'membership': MembershipService(role_repo, user_repo, permission_service),
            }

            # 2. 라우팅 및 핸들러 실행
            path = environ.get("PATH_INFO", "")
            method = environ.get("REQUEST_METHOD", "")

            handler, path_args = None, []
            for route_method, pattern, route_handler in routes:
                if method == route_method and (match := re.match(pattern, path)):
                    handler, path_args = route_handler, match.groups()
                    break

            if handler:
                status, response_body = handler(environ, *path_args)
            else:
                status, response_body = '404 Not Found', json.dumps({'error': 'Not Found'})

        except Exception as e:
            db_session.rollback()
            status, response_body = handle_exception(e)
        finally:
            db_session.close()

        logger.debug("%s %s -> %s", environ.get("REQUEST_METHOD"), environ.get("PATH_INFO"), status)
        start_response(status, [("Content-Type", "application/json")])
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## 핸들러 함수
# --------------------------------------------------------------------------

def auth_tokens_handler(environ, *args):
    body = parse_body(environ, TokenRequest)
    token = environ['services']['identity'].authenticate(body.email, body.password)
    return '201 Created', json.dumps(token)

def create_user_handler(environ, *args):
    body = parse_body(environ, UserCreateRequest)
    user = environ['services']['identity'].create_user(body.email, body.password, body.name)
    return '201 Created', json.dumps(user)

def get_current_user_handler(environ, *args):
    user_id = authorize_and_get_user_id(environ)
    return '200 OK', json.dumps(environ['services']['identity'].get_user(user_id))

def create_campaign_handler(environ, *args):
    user_id = authorize_and_get_user_id(environ)
    body = parse_body(environ, CampaignCreateRequest)
    campaign = environ['services']['campaign'].create_campaign(
        user_id, body.name, description=body.description, visibility=body.visibility
    )
    return '201 Created', json.dumps(campaign)

def list_campaigns_handler(environ, *args):
    user_id = authorize_and_get_user_id(environ)
    campaigns = environ['services']['campaign'].list_campaigns(user_id)
    return '200 OK', json.dumps({"campaigns": campaigns})

def get_campaign_handler(environ, campaign_id):
    user_id = authorize_and_get_user_id(environ)
    return '200 OK', json.dumps(environ['services']['campaign'].get_campaign(campaign_id, user_id))

def update_campaign_handler(environ, campaign_id):
    user_id = authorize_and_get_user_id(environ)
    body = parse_body(environ, CampaignUpdateRequest)
    campaign = environ['services']['campaign'].update_campaign(
        campaign_id, user_id, **body.model_dump(exclude_unset=True)
    )
    return '200 OK', json.dumps(campaign)

def delete_campaign_handler(environ, campaign_id):
    user_id = authorize_and_get_user_id(environ)
    environ['services']['campaign'].delete_campaign(campaign_id, user_id)
    return '204 No Content', ''

def get_permissions_handler(environ, campaign_id):
    user_id = authorize_and_get_user_id(environ)
    perms = environ['services']['permission'].require_campaign_access(campaign_id, user_id)
    return '200 OK', json.dumps(perms.to_dict())

def list_members_handler(environ, campaign_id):
    user_id = authorize_and_get_user_id(environ)
    members = environ['services']['membership'].list_campaign_members(campaign_id, user_id)
    return '200 OK', json.dumps(members)

def add_member_handler(environ, campaign_id):
    user_id = authorize_and_get_user_id(environ)
    body = parse_body(environ, MemberAddRequest)
    member = environ['services']['membership'].add_campaign_member(campaign_id, user_id, body.email, body.role)
    return '201 Created', json.dumps(member)

def update_member_handler(environ, campaign_id, target_user_id):
    user_id = authorize_and_get_user_id(environ)
    body = parse_body(environ, MemberUpdateRequest)
    member = environ['services']['membership'].update_campaign_member(campaign_id, user_id, target_user_id, body.role)
    return '200 OK', json.dumps(member)

def remove_member_handler(environ, campaign_id, target_user_id):
    user_id = authorize_and_get_user_id(environ)
    environ['services']['membership'].kick_member(campaign_id, user_id, target_user_id)
    return '200 OK', json.dumps({"success": True})

def leave_campaign_handler(environ, campaign_id):
    user_id = authorize_and_get_user_id(environ)
    try:
        environ['services']['membership'].leave_campaign(campaign_id, user_id)
    except OwnerRemovalForbiddenError:
        raise OwnerRemovalForbiddenError(
            "Campaign owners cannot leave their campaigns. Transfer ownership or delete the campaign instead."
        ) from None
    return '200 OK', json.dumps({"success": True})

application = create_app()

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

if __name__ == "__main__":
    setup_logging()
    try:
        with make_server(config.HOST, config.PORT, application) as httpd:
            logger.info("Serving campaign access API on port %s...", config.PORT)
            httpd.serve_forever()
    except Exception:
        logger.exception("Error starting server")
