"""
congasim - CONGA leaf/core fabric testbed on a discrete event network simulator

- core/: 事件调度、数据包、路由、管道与日志
- queues/: 输出队列
- packets/: 数据包类型
- protocols/: 传输端点
- datacenter/: 叶/核心拓扑、路由生成、流生成与仿真驱动
- api/: 配置
- testbed.py: 命令行入口
"""

__version__ = "0.1.0"
