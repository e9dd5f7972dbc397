"""캠페인 단위 역할 기반 접근 제어(RBAC) 백엔드."""
