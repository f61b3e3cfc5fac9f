import os
from dotenv import load_dotenv

# 加载环境变量
load_dotenv()


class Config:
    """Base configuration class."""
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # ==============================================================================
    # 坐标转换配置
    # ==============================================================================

    # 单次批量转换允许的最大点数，超出时接口直接返回 400
    MAX_BATCH_SIZE = int(os.environ.get('MAX_BATCH_SIZE', 10000))

    # 批量转换的线程数，0 表示顺序执行
    BATCH_MAX_WORKERS = int(os.environ.get('BATCH_MAX_WORKERS', 0))

    # GCJ-02 -> WGS-84 迭代逼近参数，由接口层显式传入转换函数
    INVERSE_TOLERANCE = float(os.environ.get('INVERSE_TOLERANCE', 1e-9))
    INVERSE_MAX_ITERATIONS = int(os.environ.get('INVERSE_MAX_ITERATIONS', 10))

    # To be configured in subclasses
    DEBUG = False
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    MAX_BATCH_SIZE = 100


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


config_by_name = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
