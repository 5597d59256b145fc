class JobError(Exception):
    pass


class JobNotFound(JobError):
    def __init__(self, job_id):
        super().__init__(f"Job {job_id} not found")
        self.job_id = job_id


class AlreadyTerminal(JobError):
    """Cancel requested on a job that already finished; nothing was changed."""

    def __init__(self, job):
        super().__init__(f"Job {job.id} is already {job.status}")
        self.job = job


class QueueUnavailable(JobError):
    """The queue broker or its result store could not be reached."""
