"""Hotel Master - 酒店后台：预订生命周期与房态管理"""
__version__ = "1.0.0"
