# 领域规则
