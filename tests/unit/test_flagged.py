"""Tests for the successFlag protocol (Flux Kontext, Midjourney)."""
import pytest

from conftest import envelope, flag_record
from kieai.core.tasks.flagged import FlagTaskModule
from kieai.core.tasks.models import Failed, Pending, Succeeded, SuccessFlag
from kieai.plugins.flux_kontext import FluxKontextAPI
from kieai.plugins.midjourney import MidjourneyAPI
from kieai.utils.exceptions import TaskFailedError, ValidationError

FLUX_GENERATE = "/api/v1/flux/kontext/generate"
FLUX_RECORD = "/api/v1/flux/kontext/record-info"
MJ_RECORD = "/api/v1/mj/record-info"


class TestFlagTaskModule:
    @pytest.mark.asyncio
    async def test_body_posted_directly(self, http_client, stub_api):
        stub_api.add("POST", "/gen", envelope({"taskId": "F1"}))
        module = FlagTaskModule(http_client, generate_path="/gen", record_path="/rec")

        response = await module.create_task({"prompt": "a fox"}, "https://hooks.example.com")

        assert response.task_id == "F1"
        body = stub_api.body(stub_api.requests[0])
        assert body == {"prompt": "a fox", "callBackUrl": "https://hooks.example.com"}

    @pytest.mark.asyncio
    async def test_path_override(self, http_client, stub_api):
        stub_api.add("POST", "/other", envelope({"taskId": "F2"}))
        module = FlagTaskModule(http_client, generate_path="/gen", record_path="/rec")
        assert (await module.create_task({}, path="/other")).task_id == "F2"

    @pytest.mark.asyncio
    async def test_missing_options(self, http_client):
        module = FlagTaskModule(http_client, generate_path="/gen", record_path="/rec")
        with pytest.raises(ValidationError):
            await module.create_task(None)

    @pytest.mark.parametrize(
        "flag, expected",
        [
            (0, Pending(state="generating")),
            (1, Succeeded(result={"resultImageUrl": "https://x/y.png"})),
            (2, Failed(code=400, message="boom", reason="CREATE_TASK_FAILED")),
            (3, Failed(code=400, message="boom", reason="GENERATE_FAILED")),
        ],
    )
    def test_outcome(self, flag, expected):
        module = FlagTaskModule(None, generate_path="/gen", record_path="/rec")
        record = module.parse_record(
            flag_record(
                flag=flag,
                result={"resultImageUrl": "https://x/y.png"} if flag == 1 else None,
                errorCode=400 if flag > 1 else None,
                errorMessage="boom" if flag > 1 else None,
            )["data"]
        )
        assert record.success_flag is SuccessFlag(flag)
        assert module.outcome(record) == expected

    def test_param_json_decoded(self):
        module = FlagTaskModule(None, generate_path="/gen", record_path="/rec")
        record = module.parse_record(flag_record()["data"])
        assert record.param == {"prompt": "a fox"}

    def test_result_string_decoded(self):
        module = FlagTaskModule(
            None, generate_path="/gen", record_path="/rec", result_field="resultInfoJson"
        )
        record = module.parse_record(
            flag_record(
                flag=1,
                result_field="resultInfoJson",
                result='{"resultUrls": [{"resultUrl": "https://x/1.png"}]}',
            )["data"]
        )
        assert record.result == {"resultUrls": [{"resultUrl": "https://x/1.png"}]}


class TestFluxKontext:
    @pytest.mark.asyncio
    async def test_generate_uses_camel_case(self, http_client, stub_api):
        stub_api.add("POST", FLUX_GENERATE, envelope({"taskId": "F1"}))
        api = FluxKontextAPI(http_client)

        await api.generate_image(
            {"prompt": "a fox", "aspect_ratio": "16:9", "model": "flux-kontext-max"}
        )

        body = stub_api.body(stub_api.requests[0])
        assert body == {"prompt": "a fox", "aspectRatio": "16:9", "model": "flux-kontext-max"}

    @pytest.mark.asyncio
    async def test_edit_requires_input_image(self, http_client, stub_api):
        api = FluxKontextAPI(http_client)
        with pytest.raises(ValidationError) as exc_info:
            await api.edit_image({"prompt": "make it blue"})
        assert "inputImage" in exc_info.value.context["field"]
        assert stub_api.requests == []

    @pytest.mark.asyncio
    async def test_safety_tolerance_bounds(self, http_client):
        api = FluxKontextAPI(http_client)
        with pytest.raises(ValidationError):
            await api.generate_image({"prompt": "a fox", "safetyTolerance": 7})
        with pytest.raises(ValidationError):
            await api.edit_image(
                {"prompt": "a fox", "inputImage": "https://x/in.png", "safetyTolerance": 3}
            )

    @pytest.mark.asyncio
    async def test_generate_failure_raises(self, http_client, stub_api):
        stub_api.add(
            "GET",
            FLUX_RECORD,
            flag_record(flag=0),
            flag_record(flag=3, errorCode=501, errorMessage="generation failed"),
        )
        api = FluxKontextAPI(http_client)
        with pytest.raises(TaskFailedError) as exc_info:
            await api.wait_for_completion("F1", max_wait_time=5, poll_interval=0.01)
        assert exc_info.value.fail_code == 501
        assert exc_info.value.context["reason"] == "GENERATE_FAILED"


class TestMidjourney:
    @pytest.mark.asyncio
    async def test_text_to_image_sets_task_type(self, http_client, stub_api):
        stub_api.add("POST", "/api/v1/mj/generate", envelope({"taskId": "M1"}))
        api = MidjourneyAPI(http_client)

        await api.text_to_image({"prompt": "a lighthouse", "speed": "fast", "variety": 10})

        body = stub_api.body(stub_api.requests[0])
        assert body == {"taskType": "mj_txt2img", "prompt": "a lighthouse", "speed": "fast", "variety": 10}

    @pytest.mark.asyncio
    async def test_image_to_image(self, http_client, stub_api):
        stub_api.add("POST", "/api/v1/mj/generate", envelope({"taskId": "M2"}))
        api = MidjourneyAPI(http_client)

        await api.image_to_image({"prompt": "in winter", "fileUrls": ["https://x/in.png"]})

        body = stub_api.body(stub_api.requests[0])
        assert body["taskType"] == "mj_img2img"
        assert body["fileUrls"] == ["https://x/in.png"]

    @pytest.mark.asyncio
    async def test_caller_cannot_switch_task_type(self, http_client):
        api = MidjourneyAPI(http_client)
        with pytest.raises(ValidationError):
            await api.text_to_image({"prompt": "x", "taskType": "mj_video"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "options",
        [
            {"prompt": "x", "variety": 7},
            {"prompt": "x", "stylization": 1001},
            {"prompt": "x", "weirdness": -1},
            {"prompt": "x", "version": "4"},
            {"prompt": ""},
        ],
    )
    async def test_invalid_text_to_image_options(self, http_client, stub_api, options):
        with pytest.raises(ValidationError):
            await MidjourneyAPI(http_client).text_to_image(options)
        assert stub_api.requests == []

    @pytest.mark.asyncio
    async def test_upscale_and_vary_paths(self, http_client, stub_api):
        stub_api.add("POST", "/api/v1/mj/generateUpscale", envelope({"taskId": "U1"}))
        stub_api.add("POST", "/api/v1/mj/generateVary", envelope({"taskId": "V1"}))
        api = MidjourneyAPI(http_client)

        upscale = await api.upscale({"taskId": "M1", "imageIndex": 2})
        vary = await api.vary({"taskId": "M1", "imageIndex": 4, "waterMark": "kie"})

        assert (upscale.task_id, vary.task_id) == ("U1", "V1")
        assert stub_api.body(stub_api.requests[0]) == {"taskId": "M1", "imageIndex": 2}
        assert stub_api.body(stub_api.requests[1])["waterMark"] == "kie"

    @pytest.mark.asyncio
    async def test_image_index_range(self, http_client):
        with pytest.raises(ValidationError):
            await MidjourneyAPI(http_client).upscale({"taskId": "M1", "imageIndex": 5})

    @pytest.mark.asyncio
    async def test_result_from_result_info_json(self, http_client, stub_api):
        result = {"resultUrls": [{"resultUrl": "https://x/1.png"}]}
        stub_api.add(
            "GET", MJ_RECORD, flag_record(flag=1, result_field="resultInfoJson", result=result)
        )
        payload = await MidjourneyAPI(http_client).wait_for_completion("M1", poll_interval=0.01)
        assert payload == result
