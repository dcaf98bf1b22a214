"""
开发环境启动脚本
"""

import os
import sys
import subprocess
import logging
from pathlib import Path

from dotenv import load_dotenv

# 添加项目根目录到Python路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def check_environment():
    """检查环境配置"""
    logger.info("Checking environment configuration...")

    # 检查.env文件
    env_file = project_root / ".env"
    if not env_file.exists():
        logger.warning(".env file not found, copying from .env.example")
        example_file = project_root / ".env.example"
        if example_file.exists():
            import shutil
            shutil.copy(example_file, env_file)
            logger.info("Please edit .env file with your configuration")
        else:
            logger.error(".env.example file not found")
            return False

    load_dotenv(env_file)

    # 启用 stellar provider 时网关密钥必填
    required_vars = ["JWT_SECRET_KEY", "ADMIN_PASSWORD"]
    if os.getenv("STELLAR_ENABLED", "true").strip().lower() not in ("0", "false", "no", "off"):
        required_vars.append("STELLAR_GATEWAY_KEY")

    missing_vars = [var for var in required_vars if not os.getenv(var)]
    if missing_vars:
        logger.error(f"Missing required environment variables: {missing_vars}")
        return False

    logger.info("Environment configuration OK")
    return True


def check_settings():
    """加载并校验应用配置"""
    logger.info("Validating settings...")

    try:
        from appbox_gateway.config import Settings
        config = Settings()
    except Exception as e:
        logger.error(f"Invalid settings: {e}")
        return None

    logger.info("Settings OK")
    return config


def start_server(host: str, port: int):
    """启动开发服务器"""
    logger.info("Starting development server...")

    cmd = [
        "uvicorn",
        "appbox_gateway.main:app",
        "--reload",
        "--host", host,
        "--port", str(port),
        "--log-level", "info"
    ]

    try:
        subprocess.run(cmd, cwd=project_root)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Failed to start server: {e}")


def main():
    """主函数"""
    logger.info("Starting AppBox Admin Gateway Development Server...")

    # 1. 检查环境
    if not check_environment():
        logger.error("Environment check failed")
        return

    # 2. 校验配置
    config = check_settings()
    if config is None:
        logger.error("Settings check failed")
        return

    logger.info("All checks passed! Starting server...")
    logger.info(f"Server will be available at: http://localhost:{config.SERVER_PORT}")
    logger.info("Press Ctrl+C to stop the server")

    # 3. 启动服务器
    start_server(config.SERVER_HOST, config.SERVER_PORT)


if __name__ == "__main__":
    main()
