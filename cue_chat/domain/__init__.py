"""领域层模型与协议。

包含：
- models: 统一的 ChatMessage / StreamOutcome / DispatchResult 等模型。
- rules: 关键词规则表 Rule / RuleStore 及其加载。
- memory: 重复提问记忆 QuestionMemory。
- conversation: 会话历史与界面消息记录。
- exceptions: 业务异常类型定义。
"""
