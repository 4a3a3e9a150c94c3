"""
认证模块

校验 Authorization: Bearer <token> 中的 JWT，并把解码后的用户信息交给路由。
令牌由登录服务签发（不在本服务内），这里只负责验证。
"""

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

# auto_error=False：缺少令牌时由我们返回统一的 401 消息
bearer_scheme = HTTPBearer(auto_error=False)


def _get_jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="服务器认证配置缺失",
        )
    return secret


def _get_jwt_algorithm() -> str:
    return os.getenv("JWT_ALGORITHM", "HS256")


def create_access_token(
    payload: Dict[str, Any],
    expires_in: timedelta = timedelta(hours=24),
    secret: Optional[str] = None,
) -> str:
    """
    签发访问令牌（供脚本与测试使用）

    Args:
        payload: 令牌载荷，至少包含用户 id
        expires_in: 有效期
        secret: 签名密钥，默认读取 JWT_SECRET
    """
    claims = dict(payload)
    claims["exp"] = datetime.now(timezone.utc) + expires_in
    return jwt.encode(claims, secret or _get_jwt_secret(), algorithm=_get_jwt_algorithm())


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """
    FastAPI 依赖：返回当前用户（令牌载荷）

    Raises:
        HTTPException(401): 缺少令牌、令牌无效或已过期
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="未授权，请登录")

    try:
        return jwt.decode(
            credentials.credentials,
            _get_jwt_secret(),
            algorithms=[_get_jwt_algorithm()],
        )
    except jwt.PyJWTError as e:
        logger.error(f"认证失败: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="令牌无效或已过期，请重新登录",
        )
