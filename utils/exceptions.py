from fastapi import HTTPException


class CustomException(HTTPException):
    # True면 JSON 대신 에러 페이지로 응답 (관리자 화면용)
    render_html = False

    def __init__(self, code: str, message: str, dev_message: str = "", status_code: int = 400, detail: str = ""):
        super().__init__(status_code=status_code, detail=message)
        self.code = code
        self.message = message
        self.dev_message = dev_message
        self.detail = detail or message

    def to_dict(self):
        return {
            "success": False,
            "data": {
                "code": self.code,
                "message": self.message,
            },
        }


class InvalidSubmissionToken(CustomException):
    def __init__(self, dev_message: str = ""):
        super().__init__(
            code="invalid_submission_token",
            message="Invalid submission token",
            dev_message=dev_message,
            status_code=403,
        )


class UnknownAction(CustomException):
    def __init__(self, action: str):
        super().__init__(
            code="unknown_action",
            message="Unknown action",
            dev_message=f"action={action!r}",
            status_code=400,
        )


class AdminRequired(CustomException):
    render_html = True

    def __init__(self, dev_message: str = ""):
        super().__init__(
            code="unauthorized_user",
            message="Unauthorized user",
            dev_message=dev_message,
            status_code=403,
        )


class InvalidClearLogsToken(CustomException):
    render_html = True

    def __init__(self, dev_message: str = ""):
        super().__init__(
            code="invalid_clear_logs_nonce",
            message="Nonce verification failed",
            dev_message=dev_message,
            status_code=403,
        )
